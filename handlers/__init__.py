"""Wire-level handlers for the Phrase synchronization tool.

This package provides the asynchronous HTTP transport for the Phrase API and the
XLIFF reader and writer used for translation files.
"""

from handlers.phrase_http import (
    AsyncCommError,
    AsyncCommTimeoutError,
    HttpResponse,
    PhraseHttp,
    UploadFile,
    flatten_fields,
)
from handlers.xliff import InvalidResourceError, XliffFileDumper, XliffFileLoader

__all__: list[str] = [
    "AsyncCommError",
    "AsyncCommTimeoutError",
    "HttpResponse",
    "InvalidResourceError",
    "PhraseHttp",
    "UploadFile",
    "XliffFileDumper",
    "XliffFileLoader",
    "flatten_fields",
]
