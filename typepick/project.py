"""tsconfig discovery and loading.

Turns a target file plus an optional explicit project pointer into a
:class:`~typepick.models.ProjectConfig` that an oracle factory can build a
program from.
"""

from __future__ import annotations

import fnmatch
import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from .errors import ProjectResolutionError
from .models import ProjectConfig

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "tsconfig.json"

DEFAULT_COMPILER_OPTIONS: Dict[str, Any] = {
    "allowJs": True,
    "esModuleInterop": True,
    "skipLibCheck": True,
    "strict": True,
    "module": "NodeNext",
    "moduleResolution": "NodeNext",
    "target": "ES2022",
    "allowSyntheticDefaultImports": True,
}

TS_EXTENSIONS = (".ts", ".tsx", ".mts", ".cts")
JS_EXTENSIONS = (".js", ".jsx", ".mjs", ".cjs")

DEFAULT_EXCLUDES = ["node_modules", "bower_components", "jspm_packages"]

_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------

def resolve_project_config(file_path: str, project: Optional[str] = None) -> Optional[str]:
    """Locate the tsconfig governing *file_path*.

    An explicit *project* must be an existing ``.json`` file or a directory
    holding ``tsconfig.json``. Without one, directories are searched upward
    from the file; None means no configuration applies.
    """
    if project:
        resolved = os.path.abspath(project)
        if not os.path.exists(resolved):
            raise ProjectResolutionError(f"Project path does not exist: {resolved}")
        if os.path.isdir(resolved):
            candidate = os.path.join(resolved, CONFIG_FILE_NAME)
            if not os.path.isfile(candidate):
                raise ProjectResolutionError(f"No tsconfig.json found in {resolved}")
            return candidate
        if os.path.splitext(resolved)[1] != ".json":
            raise ProjectResolutionError(f"Project file must be a tsconfig.json, got: {resolved}")
        return resolved

    return find_config_file(os.path.dirname(os.path.abspath(file_path)))


def find_config_file(search_path: str, name: str = CONFIG_FILE_NAME) -> Optional[str]:
    directory = Path(search_path)
    for candidate_dir in [directory, *directory.parents]:
        candidate = candidate_dir / name
        if candidate.is_file():
            logger.debug("Found %s for %s", candidate, search_path)
            return str(candidate)
    return None


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def load_project(file_path: str, config_path: Optional[str]) -> ProjectConfig:
    """Build the program description for *file_path*.

    The target file is always one of the root names, even when the
    configuration's ``files``/``include`` would leave it out.
    """
    if config_path is None:
        return ProjectConfig(
            config_path=None,
            options=dict(DEFAULT_COMPILER_OPTIONS),
            root_names=[file_path],
        )

    merged = _read_with_extends(Path(config_path), set())
    options = merged["compilerOptions"]
    config_dir = Path(config_path).parent

    root_names = _collect_root_names(merged, options, config_dir)
    if not any(_same_file(name, file_path) for name in root_names):
        root_names.append(file_path)

    references = []
    for ref in merged.get("references") or []:
        if isinstance(ref, dict) and isinstance(ref.get("path"), str):
            references.append(str((config_dir / ref["path"]).resolve()))

    logger.debug("Loaded %s: %d root file(s)", config_path, len(root_names))
    return ProjectConfig(
        config_path=config_path,
        options=options,
        root_names=root_names,
        references=references,
    )


def parse_jsonc(text: str) -> Any:
    """Parse JSON that may carry ``//``/``/* */`` comments and trailing commas."""
    return json.loads(_TRAILING_COMMA.sub(r"\1", _strip_comments(text)))


def _strip_comments(text: str) -> str:
    out: List[str] = []
    i = 0
    length = len(text)
    in_string = False
    while i < length:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < length:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
        elif ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = length if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = length if end == -1 else end + 2
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ProjectResolutionError(f"Failed to read tsconfig at {path}: {exc}") from exc
    try:
        data = parse_jsonc(text)
    except json.JSONDecodeError as exc:
        raise ProjectResolutionError(f"Failed to parse tsconfig at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ProjectResolutionError(f"Failed to parse tsconfig at {path}: expected an object")
    options = data.get("compilerOptions", {})
    if not isinstance(options, dict):
        raise ProjectResolutionError(
            f"Failed to parse tsconfig at {path}: 'compilerOptions' must be an object"
        )
    return data


def _read_with_extends(path: Path, seen: Set[Path]) -> Dict[str, Any]:
    resolved = path.resolve()
    if resolved in seen:
        raise ProjectResolutionError(f"Circularity detected while resolving configuration: {path}")
    seen.add(resolved)

    data = _read_config(path)
    merged: Dict[str, Any] = {"compilerOptions": {}}

    extends = data.get("extends")
    bases = [extends] if isinstance(extends, str) else list(extends or [])
    for base in bases:
        base_path = _resolve_extends(path.parent, base)
        base_data = _read_with_extends(base_path, seen)
        merged["compilerOptions"].update(base_data["compilerOptions"])
        for key in ("files", "include", "exclude"):
            if key in base_data:
                merged[key] = base_data[key]
                merged[f"_{key}_base"] = base_data[f"_{key}_base"]

    merged["compilerOptions"].update(data.get("compilerOptions", {}))
    for key in ("files", "include", "exclude"):
        if key in data:
            merged[key] = data[key]
            merged[f"_{key}_base"] = str(path.parent)
    if "references" in data:
        merged["references"] = data["references"]
    return merged


def _resolve_extends(config_dir: Path, base: Any) -> Path:
    if not isinstance(base, str) or not base:
        raise ProjectResolutionError(f"Invalid 'extends' entry in {config_dir}: {base!r}")

    if base.startswith(("./", "../")) or os.path.isabs(base):
        candidate = (config_dir / base)
        for option in (candidate, candidate.with_name(candidate.name + ".json")):
            if option.is_file():
                return option
        raise ProjectResolutionError(f"File '{base}' not found (extended from {config_dir})")

    for directory in [config_dir, *config_dir.parents]:
        package = directory / "node_modules" / base
        for option in (package, package.with_name(package.name + ".json"), package / CONFIG_FILE_NAME):
            if option.is_file():
                return option
    raise ProjectResolutionError(f"File '{base}' not found (extended from {config_dir})")


def _collect_root_names(merged: Dict[str, Any], options: Dict[str, Any], config_dir: Path) -> List[str]:
    extensions = TS_EXTENSIONS + (JS_EXTENSIONS if options.get("allowJs") else ())
    root_names: List[str] = []

    files = merged.get("files")
    if isinstance(files, list):
        base = Path(merged.get("_files_base", config_dir))
        for name in files:
            root_names.append(os.path.normpath(str(base / name)))

    include = merged.get("include")
    if include is None and files is None:
        include = ["**/*"]
        include_base = config_dir
    else:
        include_base = Path(merged.get("_include_base", config_dir))

    excludes = merged.get("exclude")
    if excludes is None:
        excludes = list(DEFAULT_EXCLUDES)
        if isinstance(options.get("outDir"), str):
            excludes.append(options["outDir"])
        exclude_base = config_dir
    else:
        exclude_base = Path(merged.get("_exclude_base", config_dir))

    seen = set(root_names)
    for pattern in include or []:
        for path in sorted(_expand_include(include_base, pattern)):
            if not path.name.endswith(extensions) or not path.is_file():
                continue
            if _is_excluded(path, excludes, exclude_base):
                continue
            name = os.path.normpath(str(path))
            if name not in seen:
                seen.add(name)
                root_names.append(name)
    return root_names


def _expand_include(base: Path, pattern: str) -> List[Path]:
    pattern = pattern.replace("\\", "/").rstrip("/")
    last = pattern.rsplit("/", 1)[-1]
    # A bare directory name includes everything beneath it.
    if "*" not in last and "?" not in last and "." not in last:
        pattern = f"{pattern}/**/*"
    if os.path.isabs(pattern):
        anchor = Path(pattern).anchor
        base, pattern = Path(anchor), pattern[len(anchor):]
    try:
        return list(base.glob(pattern))
    except (OSError, ValueError) as exc:
        logger.warning("Skipping include pattern %r under %s: %s", pattern, base, exc)
        return []


def _is_excluded(path: Path, excludes: List[str], base: Path) -> bool:
    try:
        rel = path.resolve().relative_to(base.resolve()).as_posix()
    except ValueError:
        return False
    for raw in excludes:
        pattern = str(raw).replace("\\", "/").strip("/")
        if pattern.startswith("./"):
            pattern = pattern[2:]
        if not pattern:
            continue
        if rel == pattern or rel.startswith(pattern + "/"):
            return True
        if fnmatch.fnmatch(rel, pattern) or fnmatch.fnmatch(rel, pattern + "/*"):
            return True
    return False


def _same_file(a: str, b: str) -> bool:
    return os.path.normcase(os.path.abspath(a)) == os.path.normcase(os.path.abspath(b))
