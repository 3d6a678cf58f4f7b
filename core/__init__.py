"""Core components of the Phrase synchronization tool.

`core.phrase` holds the translation provider and its building blocks, `core.cache` the
download cache and the stores backing it.
"""

from core.version import VERSION

__all__: list[str] = ["VERSION"]
