"""Helpers for turning a caller's identifier into the endpoints to race."""

from __future__ import annotations

from typing import Any, List, Optional, Sequence
from urllib.parse import quote

from .config import DEFAULT_PROVIDER_URLS
from .errors import InvalidIdentifier


def normalize_identifier(raw: Any) -> Optional[str]:
    """Return a clean identifier string or None when missing/blank."""
    if raw is None:
        return None
    value = (raw if isinstance(raw, str) else str(raw)).strip()
    return value or None


def build_targets(identifier: Any, templates: Optional[Sequence[str]] = None) -> List[str]:
    """Expand every provider template for ``identifier``.

    Raises ``InvalidIdentifier`` for a blank identifier, before anything touches
    the network.
    """
    value = normalize_identifier(identifier)
    if value is None:
        raise InvalidIdentifier()
    templates = DEFAULT_PROVIDER_URLS if templates is None else templates
    if not templates:
        raise ValueError("at least one provider URL template is required")
    return [t.format(id=quote(value, safe="")) for t in templates]
