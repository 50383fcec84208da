"""typepick: compiler-verified type facts for a location in a TypeScript file."""

from __future__ import annotations

__version__ = "0.1.0"

from .errors import (  # noqa: E402
    InvalidQueryError,
    OracleConstructionError,
    ProjectResolutionError,
    SourceNotFoundError,
    TypePickError,
)
from .models import OutputOptions, PatternQuery, PositionQuery, ResultRecord  # noqa: E402
from .picker import build_query, pick_type  # noqa: E402

__all__ = [
    "__version__",
    "InvalidQueryError",
    "OracleConstructionError",
    "OutputOptions",
    "PatternQuery",
    "PositionQuery",
    "ProjectResolutionError",
    "ResultRecord",
    "SourceNotFoundError",
    "TypePickError",
    "build_query",
    "pick_type",
]
