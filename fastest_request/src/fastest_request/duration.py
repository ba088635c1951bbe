"""Human-readable durations such as ``300ms``, ``-1.5h`` or ``2h45m``.

Accepts the same grammar as Go's ``time.ParseDuration``: an optional sign
followed by one or more decimal numbers, each with a unit suffix. Values are
returned in seconds as floats.
"""

from __future__ import annotations

import re

from .errors import InvalidTimeout

UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,  # micro sign
    "μs": 1e-6,  # greek mu
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_COMPONENT = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")

# Largest magnitude representable as int64 nanoseconds, about 2562047h.
MAX_DURATION = (2**63 - 1) * 1e-9


def parse_duration(text: str) -> float:
    """Parse ``text`` into seconds, raising ``InvalidTimeout`` when malformed."""
    if not isinstance(text, str):
        raise InvalidTimeout(f"invalid duration {text!r}")
    rest = text
    sign = 1.0
    if rest[:1] in ("-", "+"):
        sign = -1.0 if rest[0] == "-" else 1.0
        rest = rest[1:]
    if rest == "0":
        return 0.0
    if not rest:
        raise InvalidTimeout(f"invalid duration {text!r}")

    total = 0.0
    pos = 0
    while pos < len(rest):
        match = _COMPONENT.match(rest, pos)
        if match is None:
            raise InvalidTimeout(f"invalid duration {text!r}")
        total += float(match.group(1)) * UNITS[match.group(2)]
        pos = match.end()
    if total > MAX_DURATION:
        raise InvalidTimeout(f"invalid duration {text!r}")
    return sign * total


def _trim(value: float) -> str:
    return f"{value:.6f}".rstrip("0").rstrip(".")


def format_duration(seconds: float) -> str:
    """Render seconds back into the compact form, e.g. ``2h45m0s`` or ``300ms``."""
    if seconds == 0:
        return "0s"
    sign = "-" if seconds < 0 else ""
    total = abs(seconds)
    if total < 1:
        for unit, scale in (("ms", 1e-3), ("µs", 1e-6)):
            if total >= scale:
                return f"{sign}{_trim(total / scale)}{unit}"
        return f"{sign}{_trim(total / 1e-9)}ns"

    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    out = sign
    if hours:
        out += f"{int(hours)}h"
    if hours or minutes:
        out += f"{int(minutes)}m"
    return out + f"{_trim(secs)}s"
