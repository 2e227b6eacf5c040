"""
Permission parser — four-digit octal strings to file modes.

``"0755"`` becomes ``0o755``; the leading digit carries the
setuid/setgid/sticky bits, the other three the owner/group/other
permission triples.
"""

from __future__ import annotations

from jbupdater.core.errors import DigitOutOfRange, InvalidLength

PERMISSION_LENGTH = 4


def parse_permission(spec: str) -> int:
    """Parse a 4-character octal permission string into a mode.

    Raises:
        InvalidLength: If ``spec`` is not exactly 4 characters long.
        DigitOutOfRange: If a character is not one of ``0``..``7``.

    Both errors carry ``best_effort_mode``: the value decoded by keeping
    the low three bits of every character. It may be wrong, so callers
    must look at the exception rather than at the mode.
    """
    mode = 0
    bad_digit: str | None = None
    for ch in spec:
        value = ord(ch) - ord("0")
        if not 0 <= value <= 7 and bad_digit is None:
            bad_digit = ch
        mode = (mode << 3) | (value & 0o7)
    mode &= 0o7777

    if len(spec) != PERMISSION_LENGTH:
        raise InvalidLength(
            spec,
            f"expected {PERMISSION_LENGTH} characters, got {len(spec)}",
            best_effort_mode=mode,
        )
    if bad_digit is not None:
        raise DigitOutOfRange(
            spec,
            f"{bad_digit!r} is not an octal digit",
            best_effort_mode=mode,
        )
    return mode
