"""Fact aggregation: everything the type checker can report about one node.

Each collector is bounded (signatures, properties, declarations) so the
resulting record stays small enough to hand to another tool verbatim. The
type string is always rendered in the same maximal-verbosity mode so two
runs over the same program produce identical output.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Any, Dict, List, Optional

from . import config
from .flags import summarize_flags
from .models import (
    DeclarationSummary,
    PropertySummary,
    SignatureSummary,
    SymbolSummary,
    TypeFacts,
)
from .oracle import SignatureKind, SyntaxNode, TypeChecker, TypeFormat

logger = logging.getLogger(__name__)

VERBOSE_TYPE_FORMAT = (
    TypeFormat.NO_TRUNCATION
    | TypeFormat.USE_FULLY_QUALIFIED_TYPE
    | TypeFormat.WRITE_ARROW_STYLE_SIGNATURE
    | TypeFormat.ADD_UNDEFINED
    | TypeFormat.USE_ALIAS_DEFINED_OUTSIDE_CURRENT_SCOPE
)

ELLIPSIS = "…"

_WHITESPACE = re.compile(r"\s+")


def condense_snippet(snippet: str, max_length: Optional[int] = None) -> str:
    """Collapse whitespace to single spaces; cut at *max_length* plus an ellipsis."""
    if max_length is None:
        max_length = config.SNIPPET_MAX_LENGTH
    single_line = _WHITESPACE.sub(" ", snippet).strip()
    if len(single_line) <= max_length:
        return single_line
    return f"{single_line[:max_length]}{ELLIPSIS}"


class FactAggregator:
    """Collects type facts about syntax nodes from a :class:`TypeChecker`."""

    def __init__(
        self,
        checker: TypeChecker,
        signature_limit: Optional[int] = None,
        property_limit: Optional[int] = None,
        declaration_limit: Optional[int] = None,
        snippet_max_length: Optional[int] = None,
    ) -> None:
        self.checker = checker
        self.signature_limit = config.SIGNATURE_LIMIT if signature_limit is None else signature_limit
        self.property_limit = config.PROPERTY_LIMIT if property_limit is None else property_limit
        self.declaration_limit = (
            config.DECLARATION_LIMIT if declaration_limit is None else declaration_limit
        )
        self.snippet_max_length = (
            config.SNIPPET_MAX_LENGTH if snippet_max_length is None else snippet_max_length
        )

    def aggregate(self, node: SyntaxNode) -> TypeFacts:
        checker = self.checker
        type_ = checker.type_at_location(node)
        type_string = checker.type_to_string(type_, node, VERBOSE_TYPE_FORMAT)
        type_flags = summarize_flags(checker.type_flag_table(), checker.type_flags(type_))

        symbol = checker.symbol_at_location(node)
        if symbol is None:
            symbol = checker.type_symbol(type_)

        logger.debug("%s at %d: %s", node.kind, node.start, type_string)
        return TypeFacts(
            type_string=type_string,
            type_flags=type_flags,
            symbol=self.describe_symbol(symbol, node) if symbol is not None else None,
            signatures=tuple(self.collect_signatures(type_, node)),
            properties=tuple(self.collect_properties(type_, node)),
            declarations=tuple(self.collect_declarations(symbol)) if symbol is not None else (),
        )

    def describe_symbol(self, symbol: Any, node: SyntaxNode) -> SymbolSummary:
        checker = self.checker
        return SymbolSummary(
            name=checker.symbol_to_string(symbol, node),
            flags=summarize_flags(checker.symbol_flag_table(), checker.symbol_flags(symbol)),
        )

    def collect_signatures(self, type_: Any, node: SyntaxNode) -> List[SignatureSummary]:
        """Call signatures first, then construct signatures, each bounded."""
        signatures: List[SignatureSummary] = []
        for kind, label in ((SignatureKind.CALL, "call"), (SignatureKind.CONSTRUCT, "construct")):
            found = self.checker.signatures_of_type(type_, kind)
            for signature in found[:self.signature_limit]:
                signatures.append(SignatureSummary(
                    kind=label,
                    signature=self.checker.signature_to_string(signature, node),
                ))
        return signatures

    def collect_properties(self, type_: Any, node: SyntaxNode) -> List[PropertySummary]:
        """Properties across every member of the non-nullable type.

        With a union, a property missing from any member is optional even
        when none of its declarations say so.
        """
        checker = self.checker
        non_nullable = checker.non_nullable_type(type_)
        members = checker.union_members(non_nullable)
        if members is None:
            members = [non_nullable]

        symbol_by_name: Dict[str, Any] = {}
        presence_by_name: Dict[str, int] = {}
        optional_by_name: Dict[str, bool] = {}

        for member in members:
            apparent = checker.apparent_type(member)
            seen = set()
            for prop in checker.properties_of_type(apparent):
                name = checker.symbol_name(prop)
                symbol_by_name.setdefault(name, prop)
                if name not in seen:
                    presence_by_name[name] = presence_by_name.get(name, 0) + 1
                    seen.add(name)
                if checker.is_optional_symbol(prop):
                    optional_by_name[name] = True
                else:
                    optional_by_name.setdefault(name, False)

        total_members = len(members) or 1
        properties: List[PropertySummary] = []
        for name in sorted(symbol_by_name)[:self.property_limit]:
            prop = symbol_by_name[name]
            declarations = checker.declarations_of_symbol(prop)
            anchor = declarations[0] if declarations else node
            prop_type = checker.type_of_symbol_at_location(prop, anchor)
            optional_by_union = presence_by_name.get(name, 0) < total_members
            properties.append(PropertySummary(
                name=name,
                type=checker.type_to_string(prop_type, anchor),
                optional=optional_by_name.get(name, False) or optional_by_union,
            ))
        return properties

    def collect_declarations(self, symbol: Any) -> List[DeclarationSummary]:
        summaries: List[DeclarationSummary] = []
        for declaration in self.checker.declarations_of_symbol(symbol)[:self.declaration_limit]:
            source = declaration.source_file
            start = declaration.start
            line, character = source.line_and_character_of_position(start)
            summaries.append(DeclarationSummary(
                file=os.path.normpath(source.file_name),
                line=line + 1,
                column=character + 1,
                kind=declaration.kind,
                snippet=condense_snippet(source.text[start:declaration.end], self.snippet_max_length),
            ))
        return summaries


def aggregate(node: SyntaxNode, checker: TypeChecker) -> TypeFacts:
    return FactAggregator(checker).aggregate(node)
