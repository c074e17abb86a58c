"""Tests for the process-wide factory and the default loading strategy."""

import pathlib as _pathlib
import threading as _threading
import time as _time

import pytest as _pytest

import layerconf.errors as errors
import layerconf.factory as factory
import layerconf.parse as parse
import layerconf.tree as tree


class FixedStrategy(factory.ConfigLoadingStrategy):
    """Strategy used through LAYERCONF_STRATEGY in these tests."""

    def parse_application_config(
        self,
        options: parse.ParseOptions | None = None,
    ) -> tree.ConfigTree:
        return tree.ConfigTree({"strategy": "fixed"})


class SlowCountingStrategy(factory.ConfigLoadingStrategy):
    """Counts how often the application config is produced."""

    calls = 0

    def parse_application_config(
        self,
        options: parse.ParseOptions | None = None,
    ) -> tree.ConfigTree:
        SlowCountingStrategy.calls += 1
        _time.sleep(0.05)
        return tree.ConfigTree({"calls": SlowCountingStrategy.calls})


class NotAStrategy:
    pass


class TestDefaultStrategy:
    """DefaultConfigLoadingStrategy."""

    def test_application_resource(self, resource_dir: _pathlib.Path) -> None:
        (resource_dir / "application.json").write_text('{"name": "app"}')

        result = factory.DefaultConfigLoadingStrategy().parse_application_config()

        assert result == {"name": "app"}

    def test_nothing_found_is_empty(self) -> None:
        result = factory.DefaultConfigLoadingStrategy().parse_application_config()

        assert result.is_empty

    def test_file_override(
        self,
        tmp_path: _pathlib.Path,
        resource_dir: _pathlib.Path,
        monkeypatch: _pytest.MonkeyPatch,
    ) -> None:
        (resource_dir / "application.yaml").write_text("source: resource\n")
        override = tmp_path / "override.toml"
        override.write_text('source = "file"\n')
        monkeypatch.setenv("LAYERCONF_FILE", str(override))

        result = factory.DefaultConfigLoadingStrategy().parse_application_config()

        assert result == {"source": "file"}

    def test_resource_override(
        self,
        resource_dir: _pathlib.Path,
        monkeypatch: _pytest.MonkeyPatch,
    ) -> None:
        (resource_dir / "other.yaml").write_text("source: other\n")
        monkeypatch.setenv("LAYERCONF_RESOURCE", "other")

        result = factory.DefaultConfigLoadingStrategy().parse_application_config()

        assert result == {"source": "other"}

    def test_missing_override_raises(
        self,
        tmp_path: _pathlib.Path,
        monkeypatch: _pytest.MonkeyPatch,
    ) -> None:
        """An explicitly named source must exist."""
        monkeypatch.setenv("LAYERCONF_FILE", str(tmp_path / "absent.yaml"))

        with _pytest.raises(errors.SourceUnavailableError):
            factory.DefaultConfigLoadingStrategy().parse_application_config()

    def test_conflicting_overrides_raise(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LAYERCONF_FILE", "a.yaml")
        monkeypatch.setenv("LAYERCONF_RESOURCE", "b")

        with _pytest.raises(errors.ConfigError, match="only one of"):
            factory.DefaultConfigLoadingStrategy().parse_application_config()


class TestLoadStrategyClass:
    """Importing strategies by name."""

    @_pytest.mark.parametrize(
        "name",
        [
            "layerconf.factory:DefaultConfigLoadingStrategy",
            "layerconf.factory.DefaultConfigLoadingStrategy",
        ],
    )
    def test_both_forms(self, name: str) -> None:
        assert factory.load_strategy_class(name) is factory.DefaultConfigLoadingStrategy

    @_pytest.mark.parametrize(
        "name",
        [
            "NoModule",
            "layerconf_missing_module:Strategy",
            "layerconf.factory:Missing",
            f"{__name__}:NotAStrategy",
            "layerconf.constants:ENV_PREFIX",
        ],
    )
    def test_bad_names(self, name: str) -> None:
        with _pytest.raises(errors.MalformedInputError):
            factory.load_strategy_class(name)


class TestFactoryLoad:
    """load(), default_application(), default_reference() and caching."""

    def test_load_merges_reference(self, resource_dir: _pathlib.Path) -> None:
        (resource_dir / "application.yaml").write_text("db:\n  host: prod\n")
        (resource_dir / "reference.yaml").write_text("db:\n  host: localhost\n  port: 5432\n")

        assert factory.load() == {"db": {"host": "prod", "port": 5432}}

    def test_load_with_explicit_application(self, resource_dir: _pathlib.Path) -> None:
        (resource_dir / "reference.yaml").write_text("a: ref\nb: ref\n")

        result = factory.load(tree.ConfigTree({"a": "explicit"}))

        assert result == {"a": "explicit", "b": "ref"}

    def test_strategy_from_environment(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LAYERCONF_STRATEGY", f"{__name__}:FixedStrategy")

        assert factory.default_application() == {"strategy": "fixed"}
        assert isinstance(factory.current_strategy(), FixedStrategy)

    def test_bad_strategy_from_environment(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LAYERCONF_STRATEGY", f"{__name__}:NotAStrategy")

        with _pytest.raises(errors.MalformedInputError):
            factory.load()

    def test_results_cached_until_invalidated(self, resource_dir: _pathlib.Path) -> None:
        path = resource_dir / "application.yaml"
        path.write_text("v: 1\n")
        assert factory.load()["v"] == 1

        path.write_text("v: 2\n")
        assert factory.load()["v"] == 1

        factory.invalidate_caches()
        assert factory.load()["v"] == 2

    def test_concurrent_first_loads_compute_once(
        self,
        monkeypatch: _pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("LAYERCONF_STRATEGY", f"{__name__}:SlowCountingStrategy")
        monkeypatch.setattr(SlowCountingStrategy, "calls", 0)
        barrier = _threading.Barrier(8)
        results: list[tree.ConfigTree] = []

        def load() -> None:
            barrier.wait()
            results.append(factory.load())

        threads = [_threading.Thread(target=load) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert SlowCountingStrategy.calls == 1
        assert results == [{"calls": 1}] * 8

    def test_options_bypass_cache(self, resource_dir: _pathlib.Path) -> None:
        path = resource_dir / "application.yaml"
        path.write_text("v: 1\n")
        factory.default_application()
        path.write_text("v: 2\n")

        assert factory.default_application(parse.ParseOptions.defaults())["v"] == 2

    def test_non_utf8_application_is_parse_error(self, work_dir: _pathlib.Path) -> None:
        (work_dir / "application.yaml").write_bytes(b"a: \xff\xfe\n")

        with _pytest.raises(errors.ConfigParseError, match="invalid UTF-8"):
            factory.load()

    def test_reference_missing_is_empty(self) -> None:
        assert factory.default_reference().is_empty
