"""
Progress output — tagged, human-readable lines for the person running
the provisioner.

Two levels, mirroring the package manager's own output: ``info`` lines
are always shown, ``detail`` lines (e.g. build tool output) only in
verbose mode.  The CLI passes ``click.echo`` as the writer; without a
writer, lines go to this module's logger.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

OUTPUT_TAG = "[civicrm-provisioner]"


class ProgressReporter:
    """Writes ``> [civicrm-provisioner] <message>`` lines."""

    def __init__(
        self,
        write: Callable[[str], None] | None = None,
        verbose: bool = False,
    ):
        self._write = write
        self.verbose = verbose

    def info(self, message: str) -> None:
        """Always-visible progress message."""
        self._emit(message, logging.INFO)

    def detail(self, message: str) -> None:
        """Verbose-only message; blank messages are dropped."""
        if not message.strip():
            return
        if self.verbose:
            self._emit(message, logging.DEBUG)
        else:
            logger.debug("%s %s", OUTPUT_TAG, message)

    def _emit(self, message: str, level: int) -> None:
        line = f"> {OUTPUT_TAG} {message}"
        if self._write is None:
            logger.log(level, line)
        else:
            self._write(line)
