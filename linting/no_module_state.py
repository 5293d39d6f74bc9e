#!/usr/bin/env python
"""Reject process-wide mutable state in runtime Python modules.

Request counters, pending-request tables and listener registries must live on
a client instance so independent sessions never share them. Flagged:
- module-level lowercase names bound to mutable containers or counters
- `global` statements
- singleton naming (`*Singleton` classes, `get_instance`/`reset_instance`)

ALL_CAPS names are treated as constants and skipped.
"""

from __future__ import annotations

import ast
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT / "kromer"

SINGLETON_CLASS_SUFFIX = "Singleton"
SINGLETON_FN_NAMES = {"get_instance", "reset_instance"}
MUTABLE_FACTORIES = {"dict", "list", "set", "defaultdict", "OrderedDict", "deque", "count", "Counter"}


def _top_level_targets(node: ast.Assign | ast.AnnAssign) -> list[str]:
    if isinstance(node, ast.AnnAssign):
        return [node.target.id] if isinstance(node.target, ast.Name) else []
    return [target.id for target in node.targets if isinstance(target, ast.Name)]


def _call_name(call: ast.Call) -> str | None:
    func = call.func
    if isinstance(func, ast.Name):
        return func.id
    if isinstance(func, ast.Attribute):
        return func.attr
    return None


def _is_mutable_value(value: ast.expr | None) -> bool:
    if value is None:
        return False
    if isinstance(value, (ast.Dict, ast.List, ast.Set, ast.DictComp, ast.ListComp, ast.SetComp)):
        return True
    return isinstance(value, ast.Call) and _call_name(value) in MUTABLE_FACTORIES


def _is_constant_name(name: str) -> bool:
    return name.lstrip("_").isupper() or name == "__all__"


def collect_violations(filepath: Path, root: Path = ROOT) -> list[str]:
    try:
        source = filepath.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return []

    try:
        tree = ast.parse(source, filename=str(filepath))
    except SyntaxError:
        return []

    violations: list[str] = []
    try:
        rel = filepath.relative_to(root)
    except ValueError:
        rel = filepath

    for node in tree.body:
        if isinstance(node, ast.ClassDef) and node.name.endswith(SINGLETON_CLASS_SUFFIX):
            violations.append(f"  {rel}:{node.lineno} class `{node.name}` uses singleton naming")
            continue
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)) and node.name in SINGLETON_FN_NAMES:
            violations.append(f"  {rel}:{node.lineno} function `{node.name}` suggests singleton lifecycle")
            continue
        if isinstance(node, (ast.Assign, ast.AnnAssign)) and _is_mutable_value(node.value):
            names = [name for name in _top_level_targets(node) if not _is_constant_name(name)]
            if names:
                violations.append(f"  {rel}:{node.lineno} module-level mutable state: {', '.join(names)}")

    for node in ast.walk(tree):
        if isinstance(node, ast.Global):
            violations.append(f"  {rel}:{node.lineno} `global {', '.join(node.names)}`")

    return violations


def main() -> int:
    if not SRC_DIR.is_dir():
        print(f"[no-module-state] Missing source directory: {SRC_DIR}", file=sys.stderr)
        return 1

    violations: list[str] = []
    for py_file in sorted(SRC_DIR.rglob("*.py")):
        if "__pycache__" in py_file.parts:
            continue
        violations.extend(collect_violations(py_file))

    if not violations:
        return 0

    print("Module-level state violations:", file=sys.stderr)
    for violation in violations:
        print(violation, file=sys.stderr)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
