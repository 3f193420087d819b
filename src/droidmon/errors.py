"""
Errors a collector can raise from update().

The scraper catches CollectorError, marks that collector as failed for
the scrape and carries on with the others.
"""

from __future__ import annotations

from typing import Optional, Sequence


class CollectorError(Exception):
    """Base class for all scrape-time collector failures."""


class SourceUnavailable(CollectorError):
    """The external command could not be run or its output not captured."""

    def __init__(self, command: Sequence[str], reason: str):
        self.command = tuple(command)
        self.reason = reason
        super().__init__(f"{' '.join(self.command)}: {reason}")


class ParseError(CollectorError):
    """An expected field was not found in the source text."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"field {field!r} not found in source output")


class DecodeError(CollectorError):
    """A field matched but its text is not a valid number."""

    def __init__(self, field: str, raw: Optional[str] = None):
        self.field = field
        self.raw = raw
        super().__init__(f"field {field!r}: cannot decode {raw!r}")
