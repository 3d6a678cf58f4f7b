"""Asynchronous HTTP transport for the Phrase API.

`PhraseHttp` owns an aiohttp session bound to one Phrase project. It resolves relative
endpoint paths against the project base URL, adds the authentication and user agent
headers, flattens nested option maps into bracketed query/form fields, and returns every
response, whatever its status code, as an `HttpResponse`. Interpreting status codes is
left to the caller; only transport failures (timeouts, refused or reset connections) raise.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final, Literal, Self

import aiohttp
from aiohttp.client import ClientSession
from multidict import CIMultiDict, CIMultiDictProxy

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from aiohttp.client import ClientResponse


__all__: list[str] = [
    "AsyncCommError",
    "AsyncCommTimeoutError",
    "HttpResponse",
    "PhraseHttp",
    "UploadFile",
    "flatten_fields",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

HTTPMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]

CONNECT_TIMEOUT: Final[float] = 5.0
DEFAULT_TIMEOUT: Final[float] = 30.0


@dataclass(frozen=True)
class HttpResponse:
    """Status, headers and decoded body of a completed request.

    Attributes:
        status (int): HTTP status code.
        headers (CIMultiDictProxy[str]): Response headers, looked up case-insensitively.
        body (str): Response body decoded as UTF-8.
    """

    status: int
    headers: CIMultiDictProxy[str] = field(default_factory=lambda: CIMultiDictProxy(CIMultiDict()))
    body: str = ""

    @classmethod
    def build(cls, status: int, headers: Mapping[str, str] | None = None, body: str = "") -> HttpResponse:
        """Create a response from a plain header mapping."""
        return cls(status=status, headers=CIMultiDictProxy(CIMultiDict(headers or {})), body=body)

    def header(self, name: str, default: str = "") -> str:
        """Return the first value of a header, or `default` when it is absent."""
        return self.headers.get(name, default)

    def json(self) -> Any:
        """Parse the body as JSON. An empty body gives None."""
        if not self.body:
            return None
        return json.loads(self.body)


@dataclass(frozen=True)
class UploadFile:
    """A file part of a multipart request."""

    filename: str
    content: str
    content_type: str = "application/octet-stream"


def _to_field_value(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if value is None:
        return ""
    return str(value)


def flatten_fields(values: Mapping[str, Any], prefix: str = "") -> list[tuple[str, str]]:
    """Flatten a nested option map into bracketed field names.

    `{"format_options": {"enclose_in_cdata": "1"}, "tags": ["a", "b"]}` becomes
    `[("format_options[enclose_in_cdata]", "1"), ("tags[]", "a"), ("tags[]", "b")]`.
    Empty lists and mappings produce no field at all.

    Args:
        values (Mapping[str, Any]): Option map to flatten.
        prefix (str): Name of the enclosing field, used while recursing.

    Returns:
        list[tuple[str, str]]: Field name and value pairs in insertion order.
    """
    flattened: list[tuple[str, str]] = []
    for key, value in values.items():
        name: str = f"{prefix}[{key}]" if prefix else str(key)
        if isinstance(value, Mapping):
            flattened.extend(flatten_fields(value, name))
        elif isinstance(value, (list, tuple)):
            flattened.extend((f"{name}[]", _to_field_value(item)) for item in value)
        else:
            flattened.append((name, _to_field_value(value)))
    return flattened


class PhraseHttp:
    """aiohttp client bound to the base URL of one Phrase project.

    Args:
        base_url (str): Project base URL, e.g. "https://api.phrase.com/v2/projects/PROJECT_ID/".
        token (str): API access token, sent as `Authorization: token <token>`.
        user_agent (str): Value of the `User-Agent` header.
        timeout (float): Default total timeout per request in seconds. 0 or less disables it.
    """

    def __init__(self, *, base_url: str, token: str, user_agent: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        logger.info("%s initializing", self.__class__.__name__)
        self.base_url: str = base_url if base_url.endswith("/") else f"{base_url}/"
        self.timeout: float = timeout
        self._default_headers: dict[str, str] = {
            "Authorization": f"token {token}",
            "User-Agent": user_agent,
        }
        self.__session: ClientSession | None = None

    async def __aenter__(self) -> Self:
        logger.debug("%s entering context", self.__class__.__name__)
        self.initialize_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        _ = exc_type, exc_val, exc_tb
        logger.debug("%s exiting context", self.__class__.__name__)
        await self.close()

    def initialize_session(self) -> None:
        """Create the aiohttp session if there is none or the previous one was closed."""
        if self.__session is None or self.__session.closed:
            self.__session = ClientSession(headers=self._default_headers)
            logger.debug("%s session initialized", self.__class__.__name__)

    @property
    def session(self) -> ClientSession:
        """Get the current session, creating it on first use."""
        self.initialize_session()
        if self.__session is None:
            msg = "Session is not initialized"
            raise RuntimeError(msg)
        return self.__session

    async def close(self) -> None:
        """Close the aiohttp session if it is open."""
        if self.__session and not self.__session.closed:
            await self.__session.close()
        self.__session = None
        logger.info("%s session closed", self.__class__.__name__)

    def url_for(self, path: str) -> str:
        """Resolve an endpoint path relative to the project base URL."""
        return f"{self.base_url}{path.lstrip('/')}"

    def _build_timeout(self, total_timeout: float) -> aiohttp.ClientTimeout:
        if total_timeout <= 0:
            return aiohttp.ClientTimeout(total=None)
        if total_timeout < CONNECT_TIMEOUT:
            # Keep the connect phase from outliving the whole request.
            return aiohttp.ClientTimeout(total=total_timeout)
        return aiohttp.ClientTimeout(connect=CONNECT_TIMEOUT, total=total_timeout)

    def _build_body(
        self,
        data: Mapping[str, Any] | None,
        files: Mapping[str, UploadFile] | None,
    ) -> aiohttp.FormData | list[tuple[str, str]] | None:
        if not files:
            return flatten_fields(data) if data is not None else None

        form = aiohttp.FormData()
        for name, value in flatten_fields(data or {}):
            form.add_field(name, value)
        for name, upload in files.items():
            form.add_field(name, upload.content, filename=upload.filename, content_type=upload.content_type)
        return form

    async def request(
        self,
        method: HTTPMethod,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        data: Mapping[str, Any] | None = None,
        files: Mapping[str, UploadFile] | None = None,
        total_timeout: float | None = None,
    ) -> HttpResponse:
        """Send a request to a project endpoint.

        `data` without `files` is sent form-urlencoded; with `files` the request becomes
        multipart/form-data carrying both the fields and the file parts.

        Args:
            method (HTTPMethod): HTTP method.
            path (str): Endpoint path relative to the project base URL (e.g. "locales").
            params (Mapping[str, Any] | None): Query parameters; nested maps are flattened.
            headers (Mapping[str, str] | None): Extra request headers.
            data (Mapping[str, Any] | None): Form fields; nested maps are flattened.
            files (Mapping[str, UploadFile] | None): File parts for a multipart body.
            total_timeout (float | None): Overrides the default total timeout.

        Returns:
            HttpResponse: The response, for any status code.

        Raises:
            AsyncCommTimeoutError: If the server does not answer in time.
            AsyncCommError: If the connection cannot be established or is lost.
        """
        url: str = self.url_for(path)
        query: list[tuple[str, str]] | None = flatten_fields(params) if params is not None else None
        timeout: aiohttp.ClientTimeout = self._build_timeout(
            self.timeout if total_timeout is None else total_timeout
        )
        logger.debug("[%s] url=%s params=%s headers=%s", method, url, query, headers)

        try:
            async with self.session.request(
                method=method,
                url=url,
                params=query,
                headers=dict(headers or {}),
                data=self._build_body(data, files),
                timeout=timeout,
            ) as resp:
                return await self.decode_response(resp)

        except TimeoutError as err:
            logger.debug(err)
            msg = "Timeout due to a lack of response from the server."
            raise AsyncCommTimeoutError(msg) from err
        except ConnectionResetError as err:
            logger.debug(err)
            msg = "The connection to the server has been disconnected."
            raise AsyncCommError(msg) from err
        except aiohttp.ClientConnectorError as err:
            logger.debug(err)
            msg = "The server could not be reached."
            raise AsyncCommError(msg) from err
        except aiohttp.ClientError as err:
            logger.debug(err)
            msg = "An error occurred while communicating with the server."
            raise AsyncCommError(msg) from err

    async def decode_response(self, resp: ClientResponse) -> HttpResponse:
        """Read the whole body and freeze the response."""
        raw: bytes = await resp.read()
        body: str = raw.decode("utf-8", errors="replace") if raw else ""
        logger.debug("[%s] status=%s length=%d", resp.method, resp.status, len(body))
        return HttpResponse(status=resp.status, headers=CIMultiDictProxy(CIMultiDict(resp.headers)), body=body)


class AsyncCommError(Exception):
    """An HTTP request could not be completed at the transport level."""


class AsyncCommTimeoutError(AsyncCommError):
    """An HTTP request did not complete within its timeout."""
