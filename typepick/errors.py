"""Error taxonomy for type picking.

Every failure surfaced by :func:`typepick.pick_type` is one of the
subclasses below; the core never returns a partially filled record.
"""

from __future__ import annotations


class TypePickError(Exception):
    """Base class for all errors raised while answering a query."""


class SourceNotFoundError(TypePickError, FileNotFoundError):
    """The target file does not exist or the oracle could not load it."""


class InvalidQueryError(TypePickError, ValueError):
    """Malformed position, bad pattern, or too few pattern matches."""


class ProjectResolutionError(TypePickError):
    """Explicit project pointer is missing, unreadable, or not a valid tsconfig."""


class OracleConstructionError(TypePickError):
    """The type-system oracle failed to build its program graph."""
