"""Pytest configuration and fixtures for typepick tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest

from typepick.syntax import TreeSitterSourceFile


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch):
    """Point config at an empty temp dir so a user's ~/.typepick never leaks in."""
    config_file = tmp_path / "typepick_home" / "config.toml"
    monkeypatch.setattr("typepick.config_manager.CONFIG_FILE", config_file)
    monkeypatch.setattr("typepick.config.CONFIG_FILE", config_file)
    monkeypatch.setattr("typepick.config.CHECKER_FACTORY", "")
    monkeypatch.delenv("TYPEPICK_CHECKER", raising=False)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def write_source(temp_dir: Path) -> Callable[..., Path]:
    """Write a source file under the temp dir and return its path."""

    def _write(text: str, name: str = "sample.ts") -> Path:
        path = temp_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def parse() -> Callable[..., TreeSitterSourceFile]:
    """Parse TypeScript text in memory."""

    def _parse(text: str, name: str = "memory.ts") -> TreeSitterSourceFile:
        return TreeSitterSourceFile.parse(name, text)

    return _parse


@pytest.fixture
def union_source() -> str:
    """Union-returning function, the call result bound to ``user``."""
    return """type Basic = { id: string };
type Detailed = { id: string; email: string };

function load(full: boolean): Basic | Detailed {
  return full ? { id: "1", email: "a@example.com" } : { id: "1" };
}

const user = load(true);
"""
