"""
Text sources a collector reads from.

CommandSource runs one external process per read() and hands back its
stdout. There is no caching and no retry: every read reflects the
current device state, and failures surface as SourceUnavailable.
"""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from droidmon.errors import SourceUnavailable

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


class TextSource(ABC):
    """Anything that can produce raw text for a collector to parse."""

    @abstractmethod
    def read(self) -> str:
        """Return the current text. Raises SourceUnavailable on failure."""
        ...

    @abstractmethod
    def name(self) -> str:
        ...


class CommandSource(TextSource):

    def __init__(
        self,
        command: Sequence[str],
        timeout: float = DEFAULT_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ):
        if not command:
            raise ValueError("command must not be empty")
        self._command = tuple(command)
        self._timeout = timeout
        self._log = logger or log

    @property
    def command(self):
        return self._command

    def read(self) -> str:
        # subprocess.run kills and reaps the child on timeout, so no
        # process outlives this call
        try:
            proc = subprocess.run(
                list(self._command),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise SourceUnavailable(self._command, f"timed out after {self._timeout}s") from e
        except OSError as e:
            raise SourceUnavailable(self._command, e.strerror or str(e)) from e

        output = proc.stdout.decode("utf-8", errors="replace")

        if proc.returncode != 0:
            if not output.strip():
                stderr = proc.stderr.decode("utf-8", errors="replace").strip()
                raise SourceUnavailable(
                    self._command,
                    f"exit status {proc.returncode}" + (f": {stderr}" if stderr else ""),
                )
            # Output is still usable; let the parser decide
            self._log.warning(
                "%s exited with status %d, using its output anyway",
                self._command[0], proc.returncode,
            )

        return output

    def name(self) -> str:
        return " ".join(self._command)


class StaticSource(TextSource):
    """Fixed text. Used for tests and for replaying a saved dump."""

    def __init__(self, text: str, label: str = "static"):
        self._text = text
        self._label = label

    def read(self) -> str:
        return self._text

    def name(self) -> str:
        return self._label
