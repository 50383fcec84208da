"""Tree-sitter backed syntax layer for TypeScript sources.

Implements the parsing half of the oracle boundary: syntax trees with
character offsets, the compiler's line-break rules for offset <-> line
mapping, and syntactic diagnostics. :class:`SyntaxProgram` pairs these
parsed files with a pluggable :class:`~typepick.oracle.TypeChecker`.
"""

from __future__ import annotations

import bisect
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

import tree_sitter_typescript
from tree_sitter import Language, Parser

from .errors import SourceNotFoundError
from .models import ProjectConfig
from .oracle import (
    Diagnostic,
    DiagnosticCategory,
    Program,
    SourceFile,
    SyntaxNode,
    TypeChecker,
)

logger = logging.getLogger(__name__)

# Grammar per file extension; anything else is parsed as plain TypeScript.
GRAMMAR_BY_EXTENSION: Dict[str, str] = {
    ".tsx": "tsx",
    ".jsx": "tsx",
}

TRIVIA_KINDS = {"comment", "html_comment"}

_LINE_BREAKS = {"\n", "\r", "\u2028", "\u2029"}

BYTE_ORDER_MARK = "\ufeff"

_LANGUAGES: Dict[str, Language] = {}


def _language(grammar: str) -> Language:
    if grammar not in _LANGUAGES:
        if grammar == "tsx":
            _LANGUAGES[grammar] = Language(tree_sitter_typescript.language_tsx())
        else:
            _LANGUAGES[grammar] = Language(tree_sitter_typescript.language_typescript())
        logger.debug("Loaded tree-sitter grammar for %s", grammar)
    return _LANGUAGES[grammar]


def compute_line_starts(text: str) -> List[int]:
    """Offsets at which each line begins.

    ``\\r\\n`` counts as one break; lone ``\\r``, ``\\n``, U+2028 and U+2029
    are breaks too.
    """
    starts: List[int] = []
    line_start = 0
    pos = 0
    length = len(text)
    while pos < length:
        ch = text[pos]
        pos += 1
        if ch == "\r" and pos < length and text[pos] == "\n":
            pos += 1
        if ch in _LINE_BREAKS:
            starts.append(line_start)
            line_start = pos
    starts.append(line_start)
    return starts


def read_source_text(file_name: str) -> str:
    """File contents as UTF-8; undecodable bytes become U+FFFD instead of failing."""
    return Path(file_name).read_bytes().decode("utf-8", errors="replace")


def kind_label(node_type: str) -> str:
    """``call_expression`` -> ``CallExpression``; the root is ``SourceFile``."""
    if node_type == "program":
        return "SourceFile"
    return "".join(part[:1].upper() + part[1:] for part in node_type.split("_") if part)


class TreeSitterNode(SyntaxNode):
    def __init__(self, ts_node: Any, source_file: "TreeSitterSourceFile", full_start: int) -> None:
        self._ts_node = ts_node
        self._source_file = source_file
        self._full_start = full_start

    @property
    def kind(self) -> str:
        return kind_label(self._ts_node.type)

    @property
    def full_start(self) -> int:
        return self._full_start

    @property
    def start(self) -> int:
        return self._source_file.char_offset(self._ts_node.start_byte)

    @property
    def end(self) -> int:
        return self._source_file.char_offset(self._ts_node.end_byte)

    @property
    def source_file(self) -> "TreeSitterSourceFile":
        return self._source_file

    @property
    def ts_node(self) -> Any:
        return self._ts_node

    def children(self) -> Iterator[SyntaxNode]:
        # A child's leading trivia runs from the end of whatever precedes
        # it in the parent, tokens and comments included.
        previous_end = self._full_start
        for child in self._ts_node.children:
            if child.is_named and child.type not in TRIVIA_KINDS:
                yield TreeSitterNode(child, self._source_file, previous_end)
            previous_end = self._source_file.char_offset(child.end_byte)

    def __repr__(self) -> str:
        return f"<{self.kind} [{self.start}, {self.end})>"


class RootNode(TreeSitterNode):
    """The file node; always spans the entire text."""

    @property
    def kind(self) -> str:
        return "SourceFile"

    @property
    def full_start(self) -> int:
        return 0

    @property
    def end(self) -> int:
        return len(self._source_file.text)


class TreeSitterSourceFile(SourceFile):
    """A TypeScript file parsed with tree-sitter-typescript."""

    def __init__(self, file_name: str, text: str, tree: Any) -> None:
        self._file_name = file_name
        self._text = text
        self._tree = tree
        self._line_starts = compute_line_starts(text)
        self._byte_to_char = _byte_offset_table(text)
        self._root = RootNode(tree.root_node, self, 0)

    @classmethod
    def parse(cls, file_name: str, text: Optional[str] = None) -> "TreeSitterSourceFile":
        if text is None:
            text = read_source_text(file_name)
        # The compiler drops a leading BOM, so offsets start after it.
        if text.startswith(BYTE_ORDER_MARK):
            text = text[len(BYTE_ORDER_MARK):]
        grammar = GRAMMAR_BY_EXTENSION.get(Path(file_name).suffix.lower(), "typescript")
        parser = Parser(_language(grammar))
        tree = parser.parse(text.encode("utf-8"))
        logger.debug("Parsed %s with %s grammar", file_name, grammar)
        return cls(file_name, text, tree)

    @property
    def file_name(self) -> str:
        return self._file_name

    @property
    def text(self) -> str:
        return self._text

    @property
    def root(self) -> SyntaxNode:
        return self._root

    @property
    def line_starts(self) -> List[int]:
        return list(self._line_starts)

    def char_offset(self, byte_offset: int) -> int:
        if self._byte_to_char is None:
            return byte_offset
        return self._byte_to_char[byte_offset]

    def line_and_character_of_position(self, position: int) -> Tuple[int, int]:
        line = bisect.bisect_right(self._line_starts, position) - 1
        line = max(line, 0)
        return line, position - self._line_starts[line]

    def position_of_line_and_character(self, line: int, character: int) -> int:
        if line < 0 or line >= len(self._line_starts):
            raise ValueError(
                f"line {line} is outside the file (0..{len(self._line_starts) - 1})"
            )
        if character < 0:
            raise ValueError(f"character {character} must not be negative")
        position = self._line_starts[line] + character
        if line < len(self._line_starts) - 1:
            limit = self._line_starts[line + 1]
            if position >= limit:
                raise ValueError(
                    f"character {character} is past the end of line {line}"
                )
        elif position > len(self._text):
            raise ValueError(f"character {character} is past the end of the file")
        return position

    def syntactic_diagnostics(self) -> List[Diagnostic]:
        """ERROR and MISSING nodes reported as error diagnostics."""
        diagnostics: List[Diagnostic] = []
        root = self._tree.root_node
        if not root.has_error:
            return diagnostics

        def _walk(ts_node: Any) -> None:
            if ts_node.is_missing:
                diagnostics.append(self._diagnostic(ts_node, f"'{ts_node.type}' expected."))
                return
            if ts_node.type == "ERROR":
                snippet = self._text[
                    self.char_offset(ts_node.start_byte):self.char_offset(ts_node.end_byte)
                ].strip().split("\n", 1)[0][:40]
                if snippet:
                    message = f"Unexpected token '{snippet}'."
                else:
                    message = "Unexpected token."
                diagnostics.append(self._diagnostic(ts_node, message))
                return
            for child in ts_node.children:
                if child.has_error or child.is_missing:
                    _walk(child)

        _walk(root)
        if not diagnostics:
            diagnostics.append(self._diagnostic(root, "Syntax error."))
        return diagnostics

    def _diagnostic(self, ts_node: Any, message: str) -> Diagnostic:
        start = self.char_offset(ts_node.start_byte)
        end = self.char_offset(ts_node.end_byte)
        return Diagnostic(
            category=DiagnosticCategory.ERROR,
            message_text=message,
            file=self,
            start=start,
            length=end - start,
        )


def _byte_offset_table(text: str) -> Optional[List[int]]:
    """Map UTF-8 byte offsets to character offsets; None for pure ASCII."""
    if text.isascii():
        return None
    table: List[int] = []
    for index, ch in enumerate(text):
        table.extend([index] * len(ch.encode("utf-8")))
    table.append(len(text))
    return table


class SyntaxProgram(Program):
    """Program over tree-sitter parsed root files.

    Files are parsed on first request. Type questions go to the checker
    built by *checker_factory*; pre-emit diagnostics are the syntactic ones
    followed by the checker's semantic ones.
    """

    def __init__(
        self,
        project: ProjectConfig,
        checker_factory: Callable[["SyntaxProgram"], TypeChecker],
    ) -> None:
        self.project = project
        self._roots = {os.path.normcase(os.path.abspath(name)): name for name in project.root_names}
        self._files: Dict[str, TreeSitterSourceFile] = {}
        self._checker = checker_factory(self)

    @property
    def checker(self) -> TypeChecker:
        return self._checker

    @property
    def root_names(self) -> List[str]:
        return list(self._roots.values())

    def get_source_file(self, file_name: str) -> Optional[SourceFile]:
        key = os.path.normcase(os.path.abspath(file_name))
        if key not in self._roots:
            return None
        if key not in self._files:
            try:
                self._files[key] = TreeSitterSourceFile.parse(self._roots[key])
            except OSError as exc:
                raise SourceNotFoundError(
                    f"Failed to load source file: {self._roots[key]}: {exc}"
                ) from exc
        return self._files[key]

    def pre_emit_diagnostics(self, source_file: SourceFile) -> List[Diagnostic]:
        diagnostics: List[Diagnostic] = []
        if isinstance(source_file, TreeSitterSourceFile):
            diagnostics.extend(source_file.syntactic_diagnostics())
        diagnostics.extend(self._checker.semantic_diagnostics(source_file))
        return diagnostics
