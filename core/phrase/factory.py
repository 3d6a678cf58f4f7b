"""Builds Phrase providers from connection strings."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final

from config.dsn import Dsn, DsnError
from core.cache.response_cache import ResponseCache
from core.cache.stores import MemoryCacheStore
from core.phrase.events import EventDispatcher
from core.phrase.locales import LocaleDirectory
from core.phrase.options import ReadOptions, WriteOptions
from core.phrase.provider import PhraseProvider
from handlers.phrase_http import DEFAULT_TIMEOUT, PhraseHttp
from handlers.xliff import XliffFileDumper, XliffFileLoader
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from core.phrase.provider import CatalogueDumper, CatalogueLoader

__all__: list[str] = ["PhraseProviderFactory", "UnsupportedSchemeError"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

PHRASE_HOST: Final[str] = "api.phrase.com"


class UnsupportedSchemeError(DsnError):
    """The connection string names a provider this factory cannot build."""


class PhraseProviderFactory:
    """Creates `PhraseProvider` instances for `phrase://` connection strings.

    Collaborators given here are shared by every provider the factory creates. Each provider
    gets its own transport; providers for the same endpoint and project share one locale
    directory.

    Args:
        default_locale (str): The application's default locale.
        loader (CatalogueLoader | None): Parses downloads; XLIFF by default.
        dumper (CatalogueDumper | None): Renders uploads; XLIFF by default.
        dispatcher (EventDispatcher | None): Receives read and write events.
        cache (ResponseCache | None): Download cache; an in-memory cache by default.
        timeout (float): Total timeout per request in seconds.
    """

    SCHEMES: Final[tuple[str, ...]] = ("phrase",)

    def __init__(
        self,
        *,
        default_locale: str,
        loader: CatalogueLoader | None = None,
        dumper: CatalogueDumper | None = None,
        dispatcher: EventDispatcher | None = None,
        cache: ResponseCache | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.default_locale: str = default_locale
        self.loader: CatalogueLoader = loader or XliffFileLoader()
        self.dumper: CatalogueDumper = dumper or XliffFileDumper()
        self.dispatcher: EventDispatcher = dispatcher or EventDispatcher()
        self.cache: ResponseCache = cache or ResponseCache(MemoryCacheStore())
        self.timeout: float = timeout
        self._directories: dict[tuple[str, str], LocaleDirectory] = {}

    def supports(self, dsn: Dsn) -> bool:
        return dsn.scheme in self.SCHEMES

    def locale_directory(self, endpoint: str, project_id: str) -> LocaleDirectory:
        """Return the locale directory of a project, creating it on first use."""
        key: tuple[str, str] = (endpoint, project_id)
        directory: LocaleDirectory | None = self._directories.get(key)
        if directory is None:
            directory = LocaleDirectory(self.default_locale)
            self._directories[key] = directory
        return directory

    def create(self, dsn: Dsn | str) -> PhraseProvider:
        """Create a provider for the project named by the connection string.

        Args:
            dsn (Dsn | str): Parsed or raw connection string.

        Returns:
            PhraseProvider: A provider bound to the project.

        Raises:
            UnsupportedSchemeError: If the scheme is not "phrase".
            IncompleteDsnError: If the project id or the token is missing.
            MissingRequiredOptionError: If the `userAgent` option is missing.
        """
        if isinstance(dsn, str):
            dsn = Dsn.from_string(dsn)

        if not self.supports(dsn):
            schemes: str = ", ".join(f'"{scheme}"' for scheme in self.SCHEMES)
            msg: str = (
                f'The "{dsn.scheme}" scheme is not supported; '
                f'supported schemes for translation provider "phrase" are: {schemes}.'
            )
            raise UnsupportedSchemeError(msg)

        endpoint: str = PHRASE_HOST if dsn.host == "default" else dsn.host
        if dsn.port:
            endpoint = f"{endpoint}:{dsn.port}"

        http = PhraseHttp(
            base_url=f"https://{endpoint}/v2/projects/{dsn.user}/",
            token=dsn.password,
            user_agent=str(dsn.get_required_option("userAgent")),
            timeout=self.timeout,
        )

        read_config: Any = dsn.get_option("read", {})
        write_config: Any = dsn.get_option("write", {})
        provider = PhraseProvider(
            http,
            loader=self.loader,
            dumper=self.dumper,
            dispatcher=self.dispatcher,
            cache=self.cache,
            locales=self.locale_directory(endpoint, dsn.user),
            default_locale=self.default_locale,
            endpoint=endpoint,
            read_options=ReadOptions.from_config(read_config if isinstance(read_config, dict) else {}),
            write_options=WriteOptions.from_config(write_config if isinstance(write_config, dict) else {}),
        )
        logger.info("Created provider %s for project '%s'", provider, dsn.user)
        return provider
