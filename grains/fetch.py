"""Fetching dumps from local files and URLs."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable

import requests

from grains.config import temp_dir
from grains.dump import Dump
from grains.errors import FetchError
from grains.temp_files import defer_delete_temp_file, new_temp_file
from grains.ui import UI

logger = logging.getLogger(__name__)

# Sources fetched concurrently at a time, to bound memory use.
CHUNK_SIZE = 64
DOWNLOAD_CHUNK_BYTES = 64 * 1024

Fetcher = Callable[[str, float], Dump]


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def _parse_file(path: str) -> Dump:
    dump = Dump()
    with open(path, "rb") as f:
        dump.parse(f)
    return dump


def _download(url: str, timeout: float) -> str:
    """Stream url into a temporary file that is removed when the run ends."""
    with requests.get(url, timeout=timeout, stream=True) as resp:
        resp.raise_for_status()
        with new_temp_file(temp_dir(), "grains.", ".dump") as f:
            defer_delete_temp_file(f.name)
            for chunk in resp.iter_content(chunk_size=DOWNLOAD_CHUNK_BYTES):
                f.write(chunk)
            logger.debug("downloaded %s to %s", url, f.name)
            return f.name


def fetch(source: str, timeout: float) -> Dump:
    """Fetch and parse the dump at source, a local path or an http(s) URL."""
    if is_url(source):
        return _parse_file(_download(source, timeout))
    return _parse_file(source)


def _concurrent_fetch(
    sources: list[str],
    ui: UI,
    fetcher: Fetcher,
    timeout: float
) -> list[tuple[str, Dump]]:
    fetched = []
    with ThreadPoolExecutor(max_workers=len(sources)) as executor:
        futures = [executor.submit(fetcher, source, timeout) for source in sources]
        for source, future in zip(sources, futures):
            try:
                fetched.append((source, future.result()))
            except Exception as exc:  # failures are isolated per source
                logger.debug("fetching %s failed", source, exc_info=True)
                ui.print_err(f"{source}: {exc}")
    return fetched


def fetch_dumps(
    sources: list[str],
    ui: UI,
    fetcher: Fetcher = fetch,
    timeout: float = 60.0
) -> Dump:
    """
    Fetch every source, a chunk at a time, tolerating individual failures.

    Dumps are not merged: the first source that could be fetched, in the
    order given, is the one returned.

    Raises:
        FetchError: no source could be fetched
    """
    if not sources:
        raise FetchError("no goroutine dump file specified")

    fetched: list[tuple[str, Dump]] = []
    for start in range(0, len(sources), CHUNK_SIZE):
        fetched.extend(_concurrent_fetch(sources[start:start + CHUNK_SIZE], ui, fetcher, timeout))

    if not fetched:
        raise FetchError(f"failed to fetch any dump from {', '.join(sources)}")
    if len(fetched) != len(sources):
        ui.print_err(f"Fetched {len(fetched)} dumps out of {len(sources)}")
    if len(fetched) > 1:
        logger.warning(
            "combining %d dumps is not supported, reporting on %s only",
            len(fetched),
            fetched[0][0],
        )
    return fetched[0][1]
