"""Find the most specific syntax node at an offset."""

from __future__ import annotations

from .oracle import SyntaxNode


def locate(root: SyntaxNode, offset: int) -> SyntaxNode:
    """Deepest node whose span contains *offset*.

    Subtrees whose ``[full_start, end]`` range excludes the offset are
    skipped. A node counts as containing the offset when it lies in
    ``[start, end]``; the last such node visited depth-first wins, so a
    containing child always beats its parent, and at a boundary shared by
    two siblings the later one wins. Falls back to *root*.
    """
    best = root
    stack = [root]
    while stack:
        node = stack.pop()
        if offset < node.full_start or offset > node.end:
            continue
        if node.start <= offset <= node.end:
            best = node
        # reversed so children are visited in source order
        stack.extend(reversed(list(node.children())))
    return best
