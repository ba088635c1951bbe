"""Ask several endpoints the same question and keep the fastest answer."""

__version__ = "0.1.0"

from .errors import (  # noqa: E402
    BodyReadError,
    CombinedFailure,
    DeadlineExceeded,
    FastestRequestError,
    InvalidFlags,
    InvalidIdentifier,
    InvalidTimeout,
    TransportError,
)
from .execution import Response, race, race_sync  # noqa: E402

__all__ = [
    "__version__",
    "BodyReadError",
    "CombinedFailure",
    "DeadlineExceeded",
    "FastestRequestError",
    "InvalidFlags",
    "InvalidIdentifier",
    "InvalidTimeout",
    "TransportError",
    "Response",
    "race",
    "race_sync",
]
