"""Boundary to the type-system oracle.

The core never talks to a compiler directly. It is handed a :class:`Program`
(built by an :data:`OracleFactory`) and works through the abstract classes
below, so any engine that can parse a file and answer type questions can be
plugged in, and tests can substitute a scripted one.

Types, symbols, and signatures are opaque handles owned by the checker;
the core only passes them back into checker methods.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, List, Mapping, Optional, Tuple, Union

from .models import ProjectConfig


class SignatureKind(enum.IntEnum):
    CALL = 0
    CONSTRUCT = 1


class DiagnosticCategory(enum.IntEnum):
    WARNING = 0
    ERROR = 1
    SUGGESTION = 2
    MESSAGE = 3


class TypeFormat(enum.IntFlag):
    """Type rendering switches (values match TypeScript's ``TypeFormatFlags``)."""

    NONE = 0
    NO_TRUNCATION = 1 << 0
    WRITE_ARRAY_AS_GENERIC_TYPE = 1 << 1
    USE_STRUCTURAL_FALLBACK = 1 << 3
    WRITE_TYPE_ARGUMENTS_OF_SIGNATURE = 1 << 5
    USE_FULLY_QUALIFIED_TYPE = 1 << 6
    USE_ONLY_EXTERNAL_ALIASING = 1 << 7
    SUPPRESS_ANY_RETURN_TYPE = 1 << 8
    MULTILINE_OBJECT_LITERALS = 1 << 10
    USE_TYPE_OF_FUNCTION = 1 << 12
    USE_ALIAS_DEFINED_OUTSIDE_CURRENT_SCOPE = 1 << 14
    ADD_UNDEFINED = 1 << 17
    WRITE_ARROW_STYLE_SIGNATURE = 1 << 18


@dataclass
class DiagnosticMessageChain:
    message_text: str
    next: List["DiagnosticMessageChain"] = field(default_factory=list)


@dataclass
class Diagnostic:
    category: DiagnosticCategory
    message_text: Union[str, DiagnosticMessageChain]
    file: Optional["SourceFile"] = None
    start: Optional[int] = None
    length: Optional[int] = None


class SyntaxNode(ABC):
    """One node of a parsed syntax tree.

    ``full_start`` includes leading trivia; ``start`` does not. Both are
    character offsets into ``source_file.text``; ``end`` is exclusive.
    """

    @property
    @abstractmethod
    def kind(self) -> str:
        ...

    @property
    @abstractmethod
    def full_start(self) -> int:
        ...

    @property
    @abstractmethod
    def start(self) -> int:
        ...

    @property
    @abstractmethod
    def end(self) -> int:
        ...

    @property
    @abstractmethod
    def source_file(self) -> "SourceFile":
        ...

    @abstractmethod
    def children(self) -> Iterator["SyntaxNode"]:
        """Yield child nodes in source order (tokens and trivia excluded)."""
        ...

    def get_text(self) -> str:
        return self.source_file.text[self.start:self.end]


class SourceFile(ABC):
    """A parsed file plus the oracle's own offset <-> line/character mapping."""

    @property
    @abstractmethod
    def file_name(self) -> str:
        ...

    @property
    @abstractmethod
    def text(self) -> str:
        ...

    @property
    @abstractmethod
    def root(self) -> SyntaxNode:
        ...

    @abstractmethod
    def line_and_character_of_position(self, position: int) -> Tuple[int, int]:
        """Zero-based ``(line, character)`` of a character offset."""
        ...

    @abstractmethod
    def position_of_line_and_character(self, line: int, character: int) -> int:
        """Character offset of a zero-based line/character pair.

        Raises ``ValueError`` when the pair lies outside the file.
        """
        ...


class TypeChecker(ABC):
    """Type, symbol, and signature queries answered by the oracle."""

    @abstractmethod
    def type_at_location(self, node: SyntaxNode) -> Any:
        ...

    @abstractmethod
    def symbol_at_location(self, node: SyntaxNode) -> Optional[Any]:
        ...

    @abstractmethod
    def type_symbol(self, type_: Any) -> Optional[Any]:
        ...

    @abstractmethod
    def type_flags(self, type_: Any) -> int:
        ...

    @abstractmethod
    def symbol_flags(self, symbol: Any) -> int:
        ...

    @abstractmethod
    def symbol_name(self, symbol: Any) -> str:
        ...

    @abstractmethod
    def type_to_string(
        self,
        type_: Any,
        enclosing: Optional[SyntaxNode] = None,
        flags: TypeFormat = TypeFormat.NONE,
    ) -> str:
        ...

    @abstractmethod
    def symbol_to_string(self, symbol: Any, enclosing: Optional[SyntaxNode] = None) -> str:
        ...

    @abstractmethod
    def signatures_of_type(self, type_: Any, kind: SignatureKind) -> List[Any]:
        ...

    @abstractmethod
    def signature_to_string(self, signature: Any, enclosing: Optional[SyntaxNode] = None) -> str:
        ...

    @abstractmethod
    def non_nullable_type(self, type_: Any) -> Any:
        ...

    @abstractmethod
    def union_members(self, type_: Any) -> Optional[List[Any]]:
        """Constituents of a union type, or None when *type_* is not a union."""
        ...

    @abstractmethod
    def apparent_type(self, type_: Any) -> Any:
        ...

    @abstractmethod
    def properties_of_type(self, type_: Any) -> List[Any]:
        ...

    @abstractmethod
    def declarations_of_symbol(self, symbol: Any) -> List[SyntaxNode]:
        ...

    @abstractmethod
    def type_of_symbol_at_location(self, symbol: Any, node: SyntaxNode) -> Any:
        ...

    @abstractmethod
    def type_flag_table(self) -> Mapping[str, int]:
        ...

    @abstractmethod
    def symbol_flag_table(self) -> Mapping[str, int]:
        ...

    def is_optional_symbol(self, symbol: Any) -> bool:
        optional = self.symbol_flag_table().get("Optional", 0)
        return bool(self.symbol_flags(symbol) & optional)

    def semantic_diagnostics(self, source_file: SourceFile) -> List[Diagnostic]:
        return []


class Program(ABC):
    """A built program: loaded source files plus their checker."""

    @property
    @abstractmethod
    def checker(self) -> TypeChecker:
        ...

    @abstractmethod
    def get_source_file(self, file_name: str) -> Optional[SourceFile]:
        ...

    @abstractmethod
    def pre_emit_diagnostics(self, source_file: SourceFile) -> List[Diagnostic]:
        """Parse and type diagnostics scoped to *source_file*."""
        ...


OracleFactory = Callable[[str, ProjectConfig], Program]
