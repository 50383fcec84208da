"""Normalize oracle diagnostics for one file into a uniform shape."""

from __future__ import annotations

import logging
import os
from typing import List, Optional, Union

from .models import DiagnosticSummary
from .oracle import Diagnostic, DiagnosticMessageChain, Program, SourceFile

logger = logging.getLogger(__name__)


def flatten_message_text(
    message: Union[str, DiagnosticMessageChain, None],
    new_line: str = "\n",
    indent: int = 0,
) -> str:
    """Join a message chain into one string, nested entries indented two spaces per level."""
    if message is None:
        return ""
    if isinstance(message, str):
        return message
    result = ""
    if indent:
        result += new_line + "  " * indent
    result += message.message_text
    for child in message.next:
        result += flatten_message_text(child, new_line, indent + 1)
    return result


def summarize(diagnostic: Diagnostic) -> DiagnosticSummary:
    category = diagnostic.category.name.lower()
    message = flatten_message_text(diagnostic.message_text)
    source: Optional[SourceFile] = diagnostic.file
    if source is None or diagnostic.start is None:
        return DiagnosticSummary(category=category, message=message)
    line, character = source.line_and_character_of_position(diagnostic.start)
    return DiagnosticSummary(
        category=category,
        message=message,
        file=os.path.normpath(source.file_name),
        line=line + 1,
        column=character + 1,
    )


def report(program: Program, source_file: SourceFile) -> List[DiagnosticSummary]:
    """All pre-emit diagnostics for *source_file*, in oracle order."""
    diagnostics = [summarize(d) for d in program.pre_emit_diagnostics(source_file)]
    logger.debug("%d diagnostic(s) for %s", len(diagnostics), source_file.file_name)
    return diagnostics
