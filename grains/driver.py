"""Top-level wiring: fetch a dump, then report on it or start the shell."""

from __future__ import annotations

import io
import logging
import sys
from typing import Protocol, TextIO

from grains.config import Config
from grains.dump import Dump
from grains.fetch import Fetcher, fetch, fetch_dumps
from grains.interactive import interactive
from grains.report import Report, generate
from grains.temp_files import cleanup_temp_files
from grains.ui import UI

logger = logging.getLogger(__name__)


class Writer(Protocol):
    def open(self, name: str) -> TextIO:
        ...


class OSWriter:
    """Writer backed by regular files."""

    def open(self, name: str) -> TextIO:
        return open(name, "w", encoding="utf-8")


def generate_report(
    dump: Dump,
    cmd: list[str],
    cfg: Config,
    ui: UI,
    writer: Writer | None = None,
    out: TextIO | None = None
) -> None:
    """
    Render cmd and send it to cfg.output, or to out (stdout by default).

    A report file that cannot be written is reported through ui.
    """
    buf = io.StringIO()
    generate(buf, Report(dump, cfg), cmd)

    if not cfg.output:
        (out or sys.stdout).write(buf.getvalue())
        return

    ui.print_err("Generating report in ", cfg.output)
    try:
        with (writer or OSWriter()).open(cfg.output) as f:
            f.write(buf.getvalue())
    except OSError as exc:
        logger.debug("writing %s failed", cfg.output, exc_info=True)
        ui.print_err(f"{cfg.output}: {exc}")


def run(
    sources: list[str],
    cmd: list[str] | None,
    cfg: Config,
    ui: UI,
    fetcher: Fetcher = fetch,
    writer: Writer | None = None,
    out: TextIO | None = None
) -> None:
    """
    Fetch the dump named by sources and render cmd, or start the
    interactive shell when cmd is None.
    """
    try:
        dump = fetch_dumps(sources, ui, fetcher, cfg.timeout)
        if cmd is not None:
            generate_report(dump, cmd, cfg, ui, writer, out)
            return

        def report(dump: Dump, cmd: list[str], cfg: Config, ui: UI) -> None:
            generate_report(dump, cmd, cfg, ui, writer, out)

        interactive(dump, cfg, ui, report)
    finally:
        cleanup_temp_files()
