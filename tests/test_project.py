"""Tests for tsconfig discovery and loading."""

import json
import os

import pytest

from typepick.errors import ProjectResolutionError
from typepick.project import (
    DEFAULT_COMPILER_OPTIONS,
    find_config_file,
    load_project,
    parse_jsonc,
    resolve_project_config,
)


def _write(path, text=""):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestResolveProjectConfig:
    def test_explicit_directory(self, temp_dir):
        config = _write(temp_dir / "tsconfig.json", "{}")
        source = _write(temp_dir / "src" / "a.ts", "")
        assert resolve_project_config(str(source), str(temp_dir)) == str(config)

    def test_explicit_file(self, temp_dir):
        config = _write(temp_dir / "tsconfig.build.json", "{}")
        source = _write(temp_dir / "a.ts", "")
        assert resolve_project_config(str(source), str(config)) == str(config)

    def test_missing_path(self, temp_dir):
        with pytest.raises(ProjectResolutionError, match="Project path does not exist"):
            resolve_project_config(str(temp_dir / "a.ts"), str(temp_dir / "nope"))

    def test_directory_without_config(self, temp_dir):
        with pytest.raises(ProjectResolutionError, match="No tsconfig.json found in"):
            resolve_project_config(str(temp_dir / "a.ts"), str(temp_dir))

    def test_non_json_file(self, temp_dir):
        other = _write(temp_dir / "tsconfig.yaml", "")
        with pytest.raises(ProjectResolutionError, match="must be a tsconfig.json"):
            resolve_project_config(str(temp_dir / "a.ts"), str(other))

    def test_upward_discovery(self, temp_dir):
        config = _write(temp_dir / "tsconfig.json", "{}")
        source = _write(temp_dir / "packages" / "core" / "src" / "a.ts", "")
        assert resolve_project_config(str(source)) == str(config)

    def test_nearest_config_wins(self, temp_dir):
        _write(temp_dir / "tsconfig.json", "{}")
        inner = _write(temp_dir / "pkg" / "tsconfig.json", "{}")
        source = _write(temp_dir / "pkg" / "src" / "a.ts", "")
        assert find_config_file(str(source.parent)) == str(inner)


class TestParseJsonc:
    def test_comments_and_trailing_commas(self):
        text = """{
          // line comment
          "compilerOptions": {
            "strict": true, /* block */
            "paths": {"@/*": ["src/*",],},
          },
          "url": "http://example.com//not-a-comment",
        }"""
        data = parse_jsonc(text)
        assert data["compilerOptions"]["strict"] is True
        assert data["compilerOptions"]["paths"] == {"@/*": ["src/*"]}
        assert data["url"] == "http://example.com//not-a-comment"

    def test_invalid(self):
        with pytest.raises(json.JSONDecodeError):
            parse_jsonc("{ nope }")


class TestLoadProject:
    def test_defaults_without_config(self, temp_dir):
        source = _write(temp_dir / "a.ts", "")
        project = load_project(str(source), None)
        assert project.config_path is None
        assert project.root_names == [str(source)]
        assert project.options == DEFAULT_COMPILER_OPTIONS
        assert project.options is not DEFAULT_COMPILER_OPTIONS

    def test_default_include_and_excludes(self, temp_dir):
        config = _write(temp_dir / "tsconfig.json", '{"compilerOptions": {"outDir": "dist"}}')
        a = _write(temp_dir / "src" / "a.ts", "")
        b = _write(temp_dir / "src" / "b.tsx", "")
        _write(temp_dir / "src" / "c.js", "")
        _write(temp_dir / "dist" / "a.d.ts", "")
        _write(temp_dir / "node_modules" / "lib" / "index.ts", "")
        project = load_project(str(a), str(config))
        assert sorted(project.root_names) == sorted([str(a), str(b)])
        assert project.options == {"outDir": "dist"}

    def test_allow_js_includes_js(self, temp_dir):
        config = _write(temp_dir / "tsconfig.json", '{"compilerOptions": {"allowJs": true}}')
        a = _write(temp_dir / "a.ts", "")
        c = _write(temp_dir / "c.js", "")
        project = load_project(str(a), str(config))
        assert str(c) in project.root_names

    def test_files_and_include(self, temp_dir):
        config = _write(
            temp_dir / "tsconfig.json",
            '{"files": ["main.ts"], "include": ["lib"], "exclude": ["lib/skip"]}',
        )
        main = _write(temp_dir / "main.ts", "")
        kept = _write(temp_dir / "lib" / "kept.ts", "")
        _write(temp_dir / "lib" / "skip" / "gone.ts", "")
        _write(temp_dir / "other.ts", "")
        project = load_project(str(main), str(config))
        assert project.root_names == [str(main), str(kept)]

    def test_target_file_always_included(self, temp_dir):
        config = _write(temp_dir / "tsconfig.json", '{"files": ["main.ts"]}')
        main = _write(temp_dir / "main.ts", "")
        stray = _write(temp_dir / "scratch" / "stray.ts", "")
        project = load_project(str(stray), str(config))
        assert project.root_names == [str(main), str(stray)]

    def test_extends_merges_options(self, temp_dir):
        _write(
            temp_dir / "configs" / "base.json",
            '{"compilerOptions": {"strict": true, "target": "ES2017"}, "include": ["../src"]}',
        )
        config = _write(
            temp_dir / "tsconfig.json",
            '{"extends": "./configs/base", "compilerOptions": {"target": "ES2022"}}',
        )
        a = _write(temp_dir / "src" / "a.ts", "")
        project = load_project(str(a), str(config))
        assert project.options == {"strict": True, "target": "ES2022"}
        assert [os.path.basename(n) for n in project.root_names] == ["a.ts"]

    def test_extends_from_node_modules(self, temp_dir):
        _write(
            temp_dir / "node_modules" / "@tsconfig" / "node20" / "tsconfig.json",
            '{"compilerOptions": {"module": "node16"}}',
        )
        config = _write(temp_dir / "tsconfig.json", '{"extends": "@tsconfig/node20/tsconfig.json"}')
        a = _write(temp_dir / "a.ts", "")
        assert load_project(str(a), str(config)).options == {"module": "node16"}

    def test_extends_circularity(self, temp_dir):
        _write(temp_dir / "a.json", '{"extends": "./b.json"}')
        _write(temp_dir / "b.json", '{"extends": "./a.json"}')
        source = _write(temp_dir / "x.ts", "")
        with pytest.raises(ProjectResolutionError, match="Circularity"):
            load_project(str(source), str(temp_dir / "a.json"))

    def test_missing_extends(self, temp_dir):
        config = _write(temp_dir / "tsconfig.json", '{"extends": "./nowhere.json"}')
        with pytest.raises(ProjectResolutionError, match="not found"):
            load_project(str(temp_dir / "a.ts"), str(config))

    def test_references(self, temp_dir):
        config = _write(temp_dir / "tsconfig.json", '{"files": [], "references": [{"path": "./pkg"}]}')
        a = _write(temp_dir / "a.ts", "")
        project = load_project(str(a), str(config))
        assert project.references == [str((temp_dir / "pkg").resolve())]

    def test_invalid_json(self, temp_dir):
        config = _write(temp_dir / "tsconfig.json", "{ not json")
        with pytest.raises(ProjectResolutionError, match="Failed to parse tsconfig"):
            load_project(str(temp_dir / "a.ts"), str(config))

    def test_compiler_options_must_be_object(self, temp_dir):
        config = _write(temp_dir / "tsconfig.json", '{"compilerOptions": []}')
        with pytest.raises(ProjectResolutionError, match="'compilerOptions' must be an object"):
            load_project(str(temp_dir / "a.ts"), str(config))
