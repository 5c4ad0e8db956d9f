"""Logging for kernel hosts.

Console output goes through Rich. An optional flight recorder keeps recent
records in memory at DEBUG granularity and writes them to the kernel's log
directory (``storage/log/bootkernel.log`` by default) once something goes
wrong. Both handlers stamp every record with the kernel it belongs to, so a
line reads ``[console.local] Container cached to ...``.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import MemoryHandler
from pathlib import Path
from typing import TYPE_CHECKING, Literal, TypeAlias

import yaml
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from logging import Logger

    from bootkernel.bootstrap import Kernel

# pylint: disable=too-few-public-methods

FLIGHT_RECORDER_FILENAME = "bootkernel.log"
FLIGHT_RECORDER_CAPACITY = 2000


class KernelContextFilter(logging.Filter):
    """Set ``record.kernel`` to ``<environment>.<sub_environment>``.

    The sub-environment is read at emit time, so records logged after boot
    show the one the registry settled on.
    """

    def __init__(self, kernel: Kernel) -> None:
        super().__init__()
        self.kernel = kernel

    def filter(self, record: logging.LogRecord) -> bool:
        record.kernel = f"{self.kernel.environment}.{self.kernel.sub_environment}"
        return True


def config_console_handler(
    kernel: Kernel,
    level: int = logging.WARNING,
    debug_mode: bool = False,
    color: bool = True,
) -> RichHandler:
    """Configure and return a Rich console handler for ``kernel``.

    Args:
        kernel: The kernel whose records are stamped.
        level: Minimum level for console output (overridden to DEBUG in debug_mode).
        debug_mode: Add timestamps, logger names and source locations.
        color: Enable color output when True.
    """
    # Keep it consistent with click-extra's --color / --no-color option
    ColorSystem: TypeAlias = Literal["auto", "standard", "256", "truecolor", "windows"]
    color_system: ColorSystem | None = "auto" if color else None

    if debug_mode:
        level = logging.DEBUG

    handler = RichHandler(
        level=level,
        console=Console(color_system=color_system, stderr=True),
        rich_tracebacks=True,
        show_time=False,
        show_path=debug_mode,
        enable_link_path=debug_mode,
    )
    fmt = (
        "%(asctime)s [%(kernel)s] %(name)s: %(message)s"
        if debug_mode
        else "[%(kernel)s] %(message)s"
    )
    handler.setFormatter(logging.Formatter(fmt=fmt))
    handler.addFilter(KernelContextFilter(kernel))
    return handler


def flight_recorder_path(kernel: Kernel) -> Path:
    """Default flight recorder file, inside the kernel's log directory."""
    return kernel.log_path / FLIGHT_RECORDER_FILENAME


def config_flight_recorder(
    kernel: Kernel,
    path: Path | None = None,
    capacity: int = FLIGHT_RECORDER_CAPACITY,
    flush_on_close: bool = False,
) -> MemoryHandler:
    """Configure and return a flight recorder for ``kernel``.

    Up to ``capacity`` records are buffered and written to ``path`` (the
    kernel's log directory by default) when a WARNING or worse is emitted,
    or when the handler is closed if ``flush_on_close`` is set. The file is
    only created on the first flush.
    """
    path = path if path is not None else flight_recorder_path(kernel)
    path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(path, mode="w", encoding="utf-8", delay=True)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(process)d] %(levelname)s [%(kernel)s] "
            "%(name)s:%(lineno)d: %(message)s"
        )
    )

    recorder = MemoryHandler(
        capacity=capacity,
        flushLevel=logging.WARNING,
        target=file_handler,
        flushOnClose=flush_on_close,
    )
    recorder.addFilter(KernelContextFilter(kernel))
    return recorder


def log_startup(
    logger: Logger,
    kernel: Kernel,
    *,
    app_version: str,
    level: int,
    recorder: MemoryHandler | None = None,
    logger_levels: dict[str, int] | None = None,
) -> None:
    """Log what the kernel is about to boot from, without booting it.

    One INFO line names the kernel (environment, app path, debug flag);
    DEBUG lines cover the config directory, the cache artifact the boot will
    read or write, the flight recorder and per-logger overrides.
    """
    logger.info(
        "BOOTKERNEL %s: environment=%s, app_path=%s, debug=%s, console=%s",
        app_version,
        kernel.environment,
        kernel.app_path,
        kernel.is_debug(),
        logging.getLevelName(level),
    )

    logger.debug("Python %s, PyYAML %s", sys.version.split()[0], yaml.__version__)
    logger.debug("Config directory: %s", kernel.config_path)
    if kernel.is_debug():
        logger.debug("Cache artifact: not used in debug mode")
    else:
        artifact = kernel.get_container_cache_filename()
        logger.debug(
            "Cache artifact: %s (%s)",
            artifact,
            "present" if artifact.is_file() else "absent, will be built",
        )
    if recorder is not None:
        logger.debug(
            "Flight recorder: path=%s, capacity=%s, flush_on_close=%s",
            getattr(recorder.target, "baseFilename", "<none>"),
            recorder.capacity,
            recorder.flushOnClose,
        )
    if logger_levels:
        logger.debug(
            "Per-logger overrides: %s",
            {name: logging.getLevelName(lvl) for name, lvl in logger_levels.items()},
        )
