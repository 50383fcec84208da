"""Compose resolution, facts, and diagnostics into one result record."""

from __future__ import annotations

import dataclasses
from typing import Iterable, Optional

from .models import (
    DiagnosticSummary,
    OutputOptions,
    ResolvedLocation,
    ResultRecord,
    TypeFacts,
)
from .oracle import SyntaxNode


def assemble(
    file: str,
    project: Optional[str],
    location: ResolvedLocation,
    node: SyntaxNode,
    facts: TypeFacts,
    diagnostics: Iterable[DiagnosticSummary],
) -> ResultRecord:
    # Position queries carry no matched text; report the node's own text.
    if not location.matched_text:
        location = dataclasses.replace(location, matched_text=node.get_text())
    return ResultRecord(
        file=file,
        project=project,
        location=location,
        node_kind=node.kind,
        type_string=facts.type_string,
        type_flags=facts.type_flags,
        symbol=facts.symbol,
        signatures=tuple(facts.signatures),
        properties=tuple(facts.properties),
        declarations=tuple(facts.declarations),
        diagnostics=tuple(diagnostics),
    )


def apply_omissions(record: ResultRecord, options: OutputOptions) -> ResultRecord:
    """Blank out the list fields the caller asked to omit; nothing else changes."""
    changes = {}
    if options.omit_diagnostics:
        changes["diagnostics"] = ()
    if options.omit_properties:
        changes["properties"] = ()
    if options.omit_signatures:
        changes["signatures"] = ()
    if not changes:
        return record
    return dataclasses.replace(record, **changes)
