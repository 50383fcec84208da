"""The single exposed query operation: ``pick_type(query) -> ResultRecord``."""

from __future__ import annotations

import importlib
import logging
import os
from typing import Optional, Union

from . import config
from .aggregator import FactAggregator
from .assembler import assemble
from .diagnostics import report
from .errors import (
    InvalidQueryError,
    OracleConstructionError,
    SourceNotFoundError,
    TypePickError,
)
from .locator import locate
from .models import PatternQuery, PositionQuery, ProjectConfig, ResultRecord, TypeQuery
from .oracle import OracleFactory, Program
from .project import load_project, resolve_project_config
from .resolver import resolve

logger = logging.getLogger(__name__)


def build_query(
    file: str,
    line: Union[int, str, None] = None,
    column: Union[int, str, None] = None,
    pattern: Optional[str] = None,
    flags: Optional[str] = None,
    index: Union[int, str, None] = None,
    project: Optional[str] = None,
) -> TypeQuery:
    """Build a query from loose caller input.

    A non-empty *pattern* wins; otherwise *line* and *column* must both be
    given.
    """
    if pattern:
        return PatternQuery(
            file=file,
            pattern=pattern,
            flags=flags,
            index=0 if index is None else _as_int(index, "pattern match index"),
            project=project,
        )

    if (line is None) != (column is None):
        raise InvalidQueryError("Line and column must be provided together")
    if line is None or column is None:
        raise InvalidQueryError("Provide either a pattern or both line and column")

    try:
        return PositionQuery(file=file, line=int(line), column=int(column), project=project)
    except (TypeError, ValueError) as exc:
        raise InvalidQueryError(f"Invalid line or column: line={line}, column={column}") from exc


def _as_int(value: Union[int, str], label: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidQueryError(f"Invalid {label}: {value}") from exc


def load_oracle_factory(import_path: Optional[str] = None) -> OracleFactory:
    """Import an oracle factory from a ``"package.module:callable"`` path.

    Falls back to ``TYPEPICK_CHECKER`` (read at call time), then the
    ``[checker]`` config section.
    """
    import_path = import_path or os.environ.get("TYPEPICK_CHECKER") or config.CHECKER_FACTORY
    if not import_path:
        raise OracleConstructionError(
            "No type checker configured. Pass oracle_factory, set TYPEPICK_CHECKER, "
            "or run 'tpick set-checker package.module:factory'."
        )
    module_name, sep, attr = import_path.partition(":")
    if not sep or not module_name or not attr:
        raise OracleConstructionError(f"Checker factory must look like 'module:callable', got: {import_path}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise OracleConstructionError(f"Cannot import checker module '{module_name}': {exc}") from exc
    factory = getattr(module, attr, None)
    if not callable(factory):
        raise OracleConstructionError(f"'{attr}' in '{module_name}' is not a callable checker factory")
    return factory


def pick_type(query: TypeQuery, oracle_factory: Optional[OracleFactory] = None) -> ResultRecord:
    """Answer *query* with everything the type checker knows about the location."""
    resolved_file = os.path.abspath(query.file)
    if not os.path.isfile(resolved_file):
        raise SourceNotFoundError(f"File not found: {resolved_file}")

    config_path = resolve_project_config(resolved_file, query.project)
    project = load_project(resolved_file, config_path)

    factory = oracle_factory or load_oracle_factory()
    program = _build_program(factory, resolved_file, project)

    source_file = program.get_source_file(resolved_file)
    if source_file is None:
        raise SourceNotFoundError(f"Failed to load source file: {resolved_file}")

    location = resolve(source_file, query)
    node = locate(source_file.root, location.offset)
    logger.debug("Located %s at offset %d", node.kind, location.offset)

    facts = FactAggregator(program.checker).aggregate(node)
    diagnostics = report(program, source_file)

    return assemble(
        file=os.path.normpath(resolved_file),
        project=config_path,
        location=location,
        node=node,
        facts=facts,
        diagnostics=diagnostics,
    )


def _build_program(factory: OracleFactory, file_path: str, project: ProjectConfig) -> Program:
    try:
        return factory(file_path, project)
    except TypePickError:
        raise
    except Exception as exc:
        message = " ".join(str(exc).split()) or type(exc).__name__
        raise OracleConstructionError(f"Failed to build program for {file_path}: {message}") from exc
