"""
Field extraction from human-readable tool output.

Each ExtractionPattern pulls one value out of the text: a regex with a
single capture group, applied to the first match only, plus a decode
function turning the captured string into a float.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from droidmon.errors import DecodeError, ParseError


def decode_flag(raw: str) -> float:
    """1.0 for the exact text "true", 0.0 for anything else."""
    return 1.0 if raw == "true" else 0.0


def decode_int(raw: str) -> float:
    # int() alone would also take signs, whitespace and underscores
    if not raw.isascii() or not raw.isdigit():
        raise ValueError(f"not a base-10 integer: {raw!r}")
    return float(int(raw, 10))


def decode_signed_int(raw: str) -> float:
    """Like decode_int, but allows one leading minus sign."""
    if raw.startswith("-"):
        return -decode_int(raw[1:])
    return decode_int(raw)


def decode_tenths(raw: str) -> float:
    """Signed integer reported in tenths of a unit, e.g. 253 -> 25.3, -50 -> -5.0."""
    return decode_signed_int(raw) / 10.0


@dataclass(frozen=True)
class ExtractionPattern:
    field: str
    pattern: re.Pattern
    decode: Callable[[str], float]

    def __post_init__(self):
        if self.pattern.groups != 1:
            raise ValueError(
                f"pattern for {self.field!r} must have exactly one capture group"
            )

    def search(self, text: str) -> Optional[str]:
        match = self.pattern.search(text)
        if match is None:
            return None
        return match.group(1)

    def extract(self, text: str) -> float:
        raw = self.search(text)
        if raw is None:
            raise ParseError(self.field)
        try:
            return self.decode(raw)
        except ValueError as e:
            raise DecodeError(self.field, raw) from e


def field_pattern(field: str, regex: str, decode: Callable[[str], float]) -> ExtractionPattern:
    return ExtractionPattern(field=field, pattern=re.compile(regex, re.ASCII), decode=decode)


def extract_all(patterns: Iterable[ExtractionPattern], text: str) -> Dict[str, float]:
    """Decode every field, in pattern order. Stops at the first failure."""
    return {p.field: p.extract(text) for p in patterns}
