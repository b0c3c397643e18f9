"""Byte quantities with compact SI rendering."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ballast.errors import FormatError

_SUFFIXES = ("B", "kB", "MB", "GB", "TB", "PB", "EB")
_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([kKMGTPE]?B)\s*$")

GIGABYTE = 1000 * 1000 * 1000


@dataclass(frozen=True, order=True)
class StorageSize:
    """An immutable count of bytes.

    ``str()`` renders it the way the label value is stored on containers,
    e.g. ``25GB`` or ``4.5GB``. Units are powers of 1000.
    """

    bytes: int

    def __post_init__(self) -> None:
        if self.bytes < 0:
            object.__setattr__(self, "bytes", 0)

    def __add__(self, other: StorageSize) -> StorageSize:
        if not isinstance(other, StorageSize):
            return NotImplemented
        return StorageSize(self.bytes + other.bytes)

    def __int__(self) -> int:
        return self.bytes

    def __str__(self) -> str:
        if self.bytes < 10:
            return f"{self.bytes}B"
        exponent = 0
        while exponent < len(_SUFFIXES) - 1 and self.bytes >= 1000 ** (exponent + 1):
            exponent += 1
        value = int(self.bytes * 10 / 1000**exponent + 0.5) / 10
        rendered = f"{value:.0f}" if value >= 10 else f"{value:.1f}"
        return f"{rendered}{_SUFFIXES[exponent]}"

    @property
    def gigabytes(self) -> float:
        return self.bytes / GIGABYTE

    @classmethod
    def gb(cls, amount: float) -> StorageSize:
        return cls(int(amount * GIGABYTE))

    @classmethod
    def parse(cls, text: str) -> StorageSize:
        match = _SIZE_RE.match(text or "")
        if match is None:
            raise FormatError(f"Unrecognised storage size: {text!r}")
        number, suffix = match.groups()
        suffix = "kB" if suffix.upper() == "KB" else suffix
        exponent = _SUFFIXES.index(suffix)
        return cls(int(float(number) * 1000**exponent))
