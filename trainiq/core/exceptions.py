"""
Engine exception hierarchy.

Three failure categories exist:

- *insufficient data* is **not** an exception; every analysis returns a
  documented neutral result instead,
- :class:`InvalidInputError`: a malformed or missing identifier, raised
  immediately,
- :class:`StoreUnavailableError`: a collaborator read failed; kept distinct
  from "no data yet" so callers can tell the two apart.

The service layer maps these onto HTTP status codes.
"""

from __future__ import annotations

import re
from typing import Any, Optional


class TrainingEngineError(Exception):
    """Base class for all engine errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidInputError(TrainingEngineError, ValueError):
    """A required identifier or parameter is missing or malformed."""


class StoreUnavailableError(TrainingEngineError):
    """The log store, catalog or profile store could not be read."""


_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9_\-:.]+$")
_IDENTIFIER_MAX_LENGTH = 64


def validate_identifier(value: Any, kind: str = "identifier") -> str:
    """Return ``value`` stripped if it is a well-formed identifier.

    Raises:
        InvalidInputError: ``value`` is empty, not a string, too long or
            contains characters outside ``[A-Za-z0-9_-:.]``.
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"Missing {kind}", details={"kind": kind})

    cleaned = value.strip()
    if len(cleaned) > _IDENTIFIER_MAX_LENGTH:
        raise InvalidInputError(f"{kind} exceeds {_IDENTIFIER_MAX_LENGTH} characters",
                                details={"kind": kind, "value": cleaned[:_IDENTIFIER_MAX_LENGTH]})
    if not _IDENTIFIER_PATTERN.match(cleaned):
        raise InvalidInputError(f"Malformed {kind}: {cleaned!r}", details={"kind": kind, "value": cleaned})
    return cleaned
