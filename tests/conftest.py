"""
Shared pytest fixtures for layerconf tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import os as _os
import pathlib as _pathlib
import typing as _typing
import unittest.mock as _mock

import pytest as _pytest

import layerconf.constants as constants
import layerconf.factory as factory
import layerconf.strategy as strategy


@_pytest.fixture(autouse=True)
def isolated_env(
    tmp_path: _pathlib.Path,
    monkeypatch: _pytest.MonkeyPatch,
) -> _typing.Iterator[None]:
    """
    Isolate every test from LAYERCONF_* variables and global state.

    - Environment restored after the test (install() writes to it)
    - Working directory is a fresh temp dir (it is on the resource path)
    - Installed strategy and factory caches cleared before and after
    """
    clean_env = {
        k: v for k, v in _os.environ.items() if not k.startswith(constants.ENV_PREFIX)
    }
    work_dir = tmp_path / "cwd"
    work_dir.mkdir()
    monkeypatch.chdir(work_dir)

    with _mock.patch.dict(_os.environ, clean_env, clear=True):
        strategy.uninstall_all()
        factory.invalidate_caches()
        yield
        strategy.uninstall_all()
        factory.invalidate_caches()


@_pytest.fixture
def resource_dir(
    tmp_path: _pathlib.Path,
    monkeypatch: _pytest.MonkeyPatch,
) -> _pathlib.Path:
    """A directory placed first on LAYERCONF_RESOURCE_PATH."""
    path = tmp_path / "resources"
    path.mkdir()
    monkeypatch.setenv(constants.ENV_RESOURCE_PATH, str(path))
    return path


@_pytest.fixture
def work_dir() -> _pathlib.Path:
    """The per-test working directory (last entry on the resource path)."""
    return _pathlib.Path.cwd()
