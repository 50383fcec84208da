"""Tests for locating the most specific node at an offset."""

from typepick.locator import locate


def test_identifier_beats_enclosing_declaration(parse):
    sf = parse("function add(a: number, b: number): number {\n  return a + b;\n}\n")
    node = locate(sf.root, sf.text.index("add"))
    assert node.kind == "Identifier"
    assert node.get_text() == "add"


def test_offset_on_keyword_returns_declaration(parse):
    sf = parse("function add(a: number): number { return a; }\n")
    node = locate(sf.root, 0)
    assert node.kind == "FunctionDeclaration"


def test_callee_identifier_in_call(parse):
    text = "const total = add(1, 2);\n"
    sf = parse(text)
    node = locate(sf.root, text.index("add"))
    assert node.kind == "Identifier"
    assert node.get_text() == "add"


def test_shared_boundary_prefers_later_sibling(parse):
    text = "foo(x);\n"
    sf = parse(text)
    node = locate(sf.root, 3)
    assert node.kind == "Arguments"


def test_end_position_is_inclusive(parse):
    text = "let a = b + c;\n"
    sf = parse(text)
    node = locate(sf.root, text.index("b") + 1)
    assert node.kind == "Identifier"
    assert node.get_text() == "b"


def test_leading_trivia_falls_back_to_root(parse):
    text = "let a = 1;\n\n   let b = 2;\n"
    sf = parse(text)
    node = locate(sf.root, text.index("   let") + 1)
    assert node.kind == "SourceFile"


def test_offset_at_end_of_file(parse):
    text = "let a = 1;\n"
    sf = parse(text)
    node = locate(sf.root, len(text))
    assert node.kind == "SourceFile"


def test_deterministic(parse):
    text = "const user = { id: 1, name: 'x' };\n"
    sf = parse(text)
    offset = text.index("name")
    first = locate(sf.root, offset)
    second = locate(sf.root, offset)
    assert (first.kind, first.start, first.end) == (second.kind, second.start, second.end)
    assert first.kind == "PropertyIdentifier"
