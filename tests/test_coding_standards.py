"""
Tests that enforce coding standards.

Import conventions, checked on the parsed module so that example code in
docstrings is not mistaken for real imports:

- No 'from X import Y' outside __init__.py (re-exports are allowed there).
- Third-party and stdlib modules are aliased private: 'import yaml as _yaml'.
- Internal modules may use either alias: 'import layerconf.tree as tree'.
"""

import ast as _ast
import pathlib as _pathlib

import pytest as _pytest

ROOT = _pathlib.Path(__file__).parent.parent
SRC_DIR = ROOT / "src" / "layerconf"
TESTS_DIR = ROOT / "tests"
PACKAGE = "layerconf"


def _python_files(directory: _pathlib.Path) -> list[_pathlib.Path]:
    return sorted(directory.rglob("*.py"))


def _is_type_checking_block(node: _ast.AST) -> bool:
    if not isinstance(node, _ast.If):
        return False
    test = node.test
    if isinstance(test, _ast.Name):
        return test.id == "TYPE_CHECKING"
    return isinstance(test, _ast.Attribute) and test.attr == "TYPE_CHECKING"


def _imports(tree: _ast.Module) -> list[_ast.Import | _ast.ImportFrom]:
    """All import statements, skipping TYPE_CHECKING blocks."""
    found: list[_ast.Import | _ast.ImportFrom] = []
    pending: list[_ast.AST] = [tree]
    while pending:
        node = pending.pop()
        if _is_type_checking_block(node):
            continue
        if isinstance(node, (_ast.Import, _ast.ImportFrom)):
            found.append(node)
        pending.extend(_ast.iter_child_nodes(node))
    return sorted(found, key=lambda n: n.lineno)


def check_source(source: str, name: str = "<string>", is_init: bool = False) -> list[str]:
    """Return one message per import convention violation in source."""
    violations: list[str] = []
    for node in _imports(_ast.parse(source)):
        where = f"{name}:{node.lineno}"
        if isinstance(node, _ast.ImportFrom):
            if node.module == "__future__" or is_init:
                continue
            violations.append(f"{where}: 'from {node.module} import ...' is not allowed")
            continue
        for alias in node.names:
            internal = alias.name == PACKAGE or alias.name.startswith(f"{PACKAGE}.")
            if internal:
                continue
            if alias.asname is None or not alias.asname.startswith("_"):
                violations.append(
                    f"{where}: use 'import {alias.name} as _{alias.name.split('.')[-1]}'"
                )
    return violations


def _check_tree(directory: _pathlib.Path) -> list[str]:
    violations: list[str] = []
    for path in _python_files(directory):
        violations.extend(
            check_source(path.read_text(), str(path.relative_to(ROOT)), path.name == "__init__.py")
        )
    return violations


class TestImportStyle:
    """The codebase follows the import conventions."""

    @_pytest.mark.parametrize("directory", [SRC_DIR, TESTS_DIR], ids=["src", "tests"])
    def test_imports(self, directory: _pathlib.Path) -> None:
        violations = _check_tree(directory)

        if violations:
            _pytest.fail("Import convention violations:\n" + "\n".join(f"  {v}" for v in violations))


class TestCheckSource:
    """The checker itself."""

    def test_detects_from_import(self) -> None:
        assert len(check_source("from pathlib import Path")) == 1

    def test_allows_future_and_init_reexports(self) -> None:
        assert check_source("from __future__ import annotations") == []
        assert check_source("from layerconf.tree import ConfigTree", is_init=True) == []

    def test_requires_private_alias_for_external(self) -> None:
        assert check_source("import yaml as _yaml") == []
        assert len(check_source("import yaml")) == 1
        assert len(check_source("import httpx as httpx")) == 1

    def test_internal_modules_any_alias(self) -> None:
        assert check_source("import layerconf.tree as tree") == []
        assert check_source("import layerconf.tree._frozen as _frozen") == []
        assert check_source("import layerconf") == []

    def test_ignores_docstring_examples(self) -> None:
        source = '"""\nUsage:\n\n    from layerconf.tree import ConfigTree\n"""\n'

        assert check_source(source) == []

    def test_ignores_type_checking_block(self) -> None:
        source = (
            "import typing as _typing\n"
            "if _typing.TYPE_CHECKING:\n"
            "    from some_module import SomeType\n"
            "from forbidden import Other\n"
        )

        violations = check_source(source)

        assert len(violations) == 1
        assert "forbidden" in violations[0]

    def test_checks_function_level_imports(self) -> None:
        source = "def f():\n    import rich.console\n"

        assert len(check_source(source)) == 1
