"""Parsers for ``df`` and ``stat`` output captured from containers."""

from __future__ import annotations

import re

from ballast.errors import FormatError
from ballast.models.storage import StorageSize

_NON_DIGITS = re.compile(r"[^0-9]")
_WHOLE_GB = re.compile(r"^(\d+)G?$")


def parse_used_space(output: str) -> int:
    """Return the used-space column of ``df --block-size=1G`` output, in GB."""
    lines = output.strip().splitlines()
    if len(lines) < 2:
        raise FormatError("unexpected df output format")
    fields = lines[1].split()
    if len(fields) < 3:
        raise FormatError("unexpected df output fields")
    match = _WHOLE_GB.match(fields[2])
    if match is None:
        raise FormatError(f"failed to parse used disk size: {fields[2]!r}")
    return int(match.group(1))


def parse_file_size(output: str) -> int:
    """Return the byte count in ``stat -c %s`` output, ignoring any non-digits."""
    digits = _NON_DIGITS.sub("", output)
    if not digits:
        raise FormatError(f"failed to parse file size: {output!r}")
    return int(digits)


def parse_capacity(value: str) -> float:
    """Return a recorded threshold label as a capacity in GB."""
    return StorageSize.parse(value).gigabytes
