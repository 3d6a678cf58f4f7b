"""Synchronize translation files with a Phrase project.

Commands:
    pull    Download every configured domain and locale into the translations directory.
    push    Upload the local translation files of every configured domain and locale.
    delete  Delete the keys found in the local translation files from the project.

Local files are XLIFF documents named `{domain}.{locale}.xlf`.
Settings are read from phrase_sync.ini; see `config.loader` for the available sections.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Final, NoReturn

from config.dsn import DsnError
from config.loader import ConfigLoader, ConfigLoaderError
from core.cache import MemoryCacheStore, ResponseCache, SqliteCacheStore
from core.phrase.errors import ProviderError
from core.phrase.factory import PhraseProviderFactory
from core.version import VERSION
from handlers.phrase_http import AsyncCommError
from handlers.xliff import InvalidResourceError, XliffFileDumper, XliffFileLoader
from models.catalogue_models import TranslatorBag
from utils.file_utils import FileMissingError, FileUtils, FileUtilsError
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Sequence

    from config.dsn import Dsn
    from core.phrase.provider import PhraseProvider
    from models.config_models import Config

CFG_FILE: Final[str] = "phrase_sync.ini"
XLIFF_SUFFIXES: Final[list[str]] = [".xlf", ".xliff"]
COMMANDS: Final[tuple[str, ...]] = ("pull", "push", "delete")

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        print(f"\n{message}\n", file=sys.stderr)
        self.print_help(sys.stderr)
        raise SystemExit(2)


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        argparse.Namespace: Parsed arguments.
    """
    parser = _ArgumentParser(
        description="Synchronize translation files with a Phrase project",
        epilog="Example: python phrase_sync.py pull --domain messages --locale en_GB",
    )
    parser.add_argument("command", choices=COMMANDS, help="Synchronization to run")
    parser.add_argument("--config", dest="config", metavar="FILE", default=CFG_FILE, help="Configuration file")
    parser.add_argument(
        "--domain", dest="domains", metavar="DOMAIN", action="append", help="Domain to synchronize (repeatable)"
    )
    parser.add_argument(
        "--locale", dest="locales", metavar="LOCALE", action="append", help="Locale to synchronize (repeatable)"
    )
    parser.add_argument("--debug", dest="debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> ConfigLoader:
    """Load the configuration file and apply CLI overrides.

    Raises:
        ConfigLoaderError: If configuration file cannot be loaded.
    """
    script_name: str = Path(sys.argv[0]).stem
    return ConfigLoader(
        config_filename=args.config,
        script_name=script_name,
        debug=args.debug,
        domains=args.domains,
        locales=args.locales,
    )


def build_cache(config: Config) -> ResponseCache:
    """Create the download cache; persistent when `PHRASE.CACHE_FILE` is set."""
    if config.PHRASE.CACHE_FILE:
        return ResponseCache(SqliteCacheStore(FileUtils.resolve_path(config.PHRASE.CACHE_FILE)))
    return ResponseCache(MemoryCacheStore())


def build_provider(config: Config, dsn: Dsn, cache: ResponseCache) -> PhraseProvider:
    factory = PhraseProviderFactory(
        default_locale=config.PHRASE.DEFAULT_LOCALE,
        loader=XliffFileLoader(),
        dumper=XliffFileDumper(),
        cache=cache,
        timeout=config.PHRASE.TIMEOUT,
    )
    return factory.create(dsn)


def load_local_bag(directory: Path, domains: Sequence[str], locales: Sequence[str]) -> TranslatorBag:
    """Load the local translation files of every domain and locale.

    Missing files are skipped with a warning.

    Raises:
        InvalidResourceError: If a file is not valid XLIFF.
        UnsupportedFileFormatError: If a catalogue path does not carry an XLIFF suffix.
    """
    loader = XliffFileLoader()
    bag = TranslatorBag()
    for locale in locales:
        for domain in domains:
            file_path: Path = FileUtils.catalogue_path(directory, domain, locale)
            try:
                FileUtils.validate_file_path(file_path, XLIFF_SUFFIXES)
            except FileMissingError:
                logger.warning("Translation file not found, skipped: %s", file_path)
                continue
            bag.add_catalogue(loader.load(file_path.read_text(encoding="utf-8"), locale, domain))
    return bag


async def pull(provider: PhraseProvider, config: Config, directory: Path) -> int:
    """Download the configured catalogues and write them to the translations directory.

    Returns:
        int: Number of files written.
    """
    bag: TranslatorBag = await provider.read(config.SYNC.DOMAINS, config.SYNC.LOCALES)
    dumper = XliffFileDumper()
    written: int = 0
    for catalogue in bag.catalogues():
        for domain in catalogue.domains():
            file_path: Path = FileUtils.catalogue_path(directory, domain, catalogue.locale)
            content: str = dumper.format_catalogue(catalogue, domain, default_locale=config.PHRASE.DEFAULT_LOCALE)
            FileUtils.write_text(file_path, content)
            logger.debug("Wrote %s", file_path)
            written += 1
    return written


async def push(provider: PhraseProvider, config: Config, directory: Path) -> int:
    """Upload the local catalogues. Returns the number of catalogues sent."""
    bag: TranslatorBag = load_local_bag(directory, config.SYNC.DOMAINS, config.SYNC.LOCALES)
    await provider.write(bag)
    return len(bag)


async def delete(provider: PhraseProvider, config: Config, directory: Path) -> int:
    """Delete the keys of the local catalogues. Returns the number of catalogues processed."""
    bag: TranslatorBag = load_local_bag(directory, config.SYNC.DOMAINS, config.SYNC.LOCALES)
    await provider.delete(bag)
    return len(bag)


async def run(args: argparse.Namespace) -> int:
    """Run one command.

    Returns:
        int: Process exit status, 0 on success and 1 on failure.
    """
    try:
        loader: ConfigLoader = load_config(args)
    except ConfigLoaderError as err:
        print("\nError: Failed to load configuration file.", file=sys.stderr)
        print(f"Details: {err}", file=sys.stderr)
        return 1

    config: Config = loader.config
    LoggerUtils.configure(
        FileUtils.resolve_path(config.GENERAL.LOG_FILE) if config.GENERAL.LOG_FILE else "",
        level=config.GENERAL.LOG_LEVEL,
    )
    if not config.SYNC.DOMAINS or not config.SYNC.LOCALES:
        print("\nError: No domains or locales to synchronize.", file=sys.stderr)
        print("Set SYNC.DOMAINS and SYNC.LOCALES or pass --domain and --locale.", file=sys.stderr)
        return 1

    directory: Path = FileUtils.resolve_path(config.SYNC.TRANSLATIONS_DIR)
    commands = {"pull": pull, "push": push, "delete": delete}
    cache: ResponseCache = build_cache(config)
    try:
        async with build_provider(config, loader.dsn, cache) as provider:
            count: int = await commands[args.command](provider, config, directory)
    except (DsnError, ProviderError, AsyncCommError, InvalidResourceError, FileUtilsError) as err:
        logger.debug("'%s' failed", args.command, exc_info=True)
        print(f"\nError: {err}", file=sys.stderr)
        return 1
    finally:
        if isinstance(cache.store, SqliteCacheStore):
            cache.store.close()

    print(f"{args.command}: {count} item(s) processed ({directory})")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args: argparse.Namespace = parse_arguments(argv)
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        print("\n\nCancelled by user.", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
