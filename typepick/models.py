"""Core data models shared by resolution, aggregation, and assembly."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class PositionQuery:
    file: str
    line: int
    column: int
    project: Optional[str] = None


@dataclass(frozen=True)
class PatternQuery:
    file: str
    pattern: str
    flags: Optional[str] = None
    index: int = 0
    project: Optional[str] = None


TypeQuery = Union[PositionQuery, PatternQuery]


@dataclass(frozen=True)
class ResolvedLocation:
    offset: int
    line: int
    column: int
    matched_text: str = ""


@dataclass(frozen=True)
class FlagSummary:
    flags: int
    names: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"flags": self.flags, "names": list(self.names)}


@dataclass(frozen=True)
class SymbolSummary:
    name: str
    flags: FlagSummary

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "flags": self.flags.to_dict()}


@dataclass(frozen=True)
class SignatureSummary:
    kind: str  # "call" | "construct"
    signature: str

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "signature": self.signature}


@dataclass(frozen=True)
class PropertySummary:
    name: str
    type: str
    optional: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.type, "optional": self.optional}


@dataclass(frozen=True)
class DeclarationSummary:
    file: str
    line: int
    column: int
    kind: str
    snippet: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "kind": self.kind,
            "snippet": self.snippet,
        }


@dataclass(frozen=True)
class DiagnosticSummary:
    category: str  # "error" | "warning" | "suggestion" | "message"
    message: str
    file: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"category": self.category, "message": self.message}
        if self.file is not None:
            data["file"] = self.file
            data["line"] = self.line
            data["column"] = self.column
        return data


@dataclass(frozen=True)
class TypeFacts:
    """Everything the fact aggregator learned about one node."""

    type_string: str
    type_flags: FlagSummary
    symbol: Optional[SymbolSummary] = None
    signatures: Tuple[SignatureSummary, ...] = ()
    properties: Tuple[PropertySummary, ...] = ()
    declarations: Tuple[DeclarationSummary, ...] = ()


@dataclass(frozen=True)
class ResultRecord:
    """The full answer to one query.

    ``to_dict`` produces the camelCase JSON shape consumed by callers;
    ``project`` and ``symbol`` are left out when absent.
    """

    file: str
    location: ResolvedLocation
    node_kind: str
    type_string: str
    type_flags: FlagSummary
    project: Optional[str] = None
    symbol: Optional[SymbolSummary] = None
    signatures: Tuple[SignatureSummary, ...] = ()
    properties: Tuple[PropertySummary, ...] = ()
    declarations: Tuple[DeclarationSummary, ...] = ()
    diagnostics: Tuple[DiagnosticSummary, ...] = ()

    @property
    def matched_text(self) -> str:
        return self.location.matched_text

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"file": self.file}
        if self.project is not None:
            data["project"] = self.project
        data["position"] = {
            "line": self.location.line,
            "column": self.location.column,
            "offset": self.location.offset,
        }
        data["matchedText"] = self.location.matched_text
        data["nodeKind"] = self.node_kind
        data["typeString"] = self.type_string
        data["typeFlags"] = self.type_flags.to_dict()
        if self.symbol is not None:
            data["symbol"] = self.symbol.to_dict()
        data["signatures"] = [s.to_dict() for s in self.signatures]
        data["properties"] = [p.to_dict() for p in self.properties]
        data["declarations"] = [d.to_dict() for d in self.declarations]
        data["diagnostics"] = [d.to_dict() for d in self.diagnostics]
        return data


@dataclass(frozen=True)
class OutputOptions:
    """Caller preferences for which list fields to blank out."""

    omit_diagnostics: bool = False
    omit_properties: bool = False
    omit_signatures: bool = False


@dataclass
class ProjectConfig:
    """Compiler options and root files for one program build."""

    config_path: Optional[str]
    options: Dict[str, Any] = field(default_factory=dict)
    root_names: List[str] = field(default_factory=list)
    references: List[str] = field(default_factory=list)
