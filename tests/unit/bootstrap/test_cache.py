"""Unit tests for the compiled-registry cache."""

import hashlib
from pathlib import Path

import pytest

from bootkernel.adapters.compiler.yaml_dumper import YamlCompiler
from bootkernel.adapters.registry.memory import ServiceRegistry
from bootkernel.bootstrap.cache import (
    ContainerCache,
    cache_filename,
    cache_key,
    is_cacheable,
)
from bootkernel.bootstrap.errors import CacheLoadError, CacheWriteError

# pylint: disable=redefined-outer-name
# pylint: disable=magic-value-comparison


@pytest.fixture
def compiled() -> ServiceRegistry:
    """A compiled registry with a couple of parameters."""
    registry = ServiceRegistry({"app.name": "App"})
    registry.set_parameter("greeting", "hello %app.name%")
    registry.compile()
    return registry


class TestCacheKey:
    """The artifact key is md5(environment + app_path)."""

    @staticmethod
    def test_key_is_md5_of_inputs():
        """The key is the hex md5 of the concatenated inputs."""
        assert cache_key("x", "/a/b") == hashlib.md5(b"x/a/b").hexdigest()

    @staticmethod
    def test_key_is_deterministic():
        """Repeated calls give the same key."""
        assert cache_key("x", "/a/b") == cache_key("x", Path("/a/b"))

    @staticmethod
    @pytest.mark.parametrize(("env", "path"), [("y", "/a/b"), ("x", "/a/c")])
    def test_key_changes_with_inputs(env: str, path: str):
        """Changing either input changes the key."""
        assert cache_key(env, path) != cache_key("x", "/a/b")

    @staticmethod
    def test_filename():
        """The artifact lives in the cache directory with a fixed prefix."""
        filename = cache_filename(Path("/var/cache"), "x", "/a/b")
        assert filename.parent == Path("/var/cache")
        assert filename.name == f"container_{cache_key('x', '/a/b')}.yml"


class TestIsCacheable:
    """The ``container.cache`` parameter controls persistence."""

    @staticmethod
    def test_default_is_true():
        """Without the parameter, the registry is cacheable."""
        assert is_cacheable(ServiceRegistry()) is True

    @staticmethod
    @pytest.mark.parametrize(("value", "expected"), [(False, False), (True, True), (0, False)])
    def test_parameter_value(value, expected):
        """The parameter's truth value is returned."""
        assert is_cacheable(ServiceRegistry({"container.cache": value})) is expected


class TestContainerCache:
    """Reading, writing and clearing one artifact."""

    @staticmethod
    def test_persist_then_load(tmp_path: Path, compiled: ServiceRegistry):
        """A persisted registry loads back with the same parameters."""
        cache = ContainerCache(tmp_path / "cache" / "container_x.yml", YamlCompiler())
        assert not cache.exists()

        cache.persist(compiled)

        assert cache.exists()
        loaded = cache.load()
        assert loaded.is_compiled
        assert loaded.get_parameter("greeting") == "hello App"

    @staticmethod
    def test_persist_leaves_no_temporary_files(tmp_path: Path, compiled):
        """Only the artifact remains in the cache directory."""
        cache = ContainerCache(tmp_path / "container_x.yml", YamlCompiler())
        cache.persist(compiled)
        assert [p.name for p in tmp_path.iterdir()] == ["container_x.yml"]

    @staticmethod
    def test_persist_failure_raises(tmp_path: Path, compiled):
        """A file system error is surfaced as CacheWriteError."""
        blocker = tmp_path / "cache"
        blocker.write_text("not a directory", encoding="utf-8")
        cache = ContainerCache(blocker / "container_x.yml", YamlCompiler())
        with pytest.raises(CacheWriteError):
            cache.persist(compiled)

    @staticmethod
    def test_persist_uncompiled_registry_raises(tmp_path: Path):
        """The compiler refuses open registries."""
        cache = ContainerCache(tmp_path / "container_x.yml", YamlCompiler())
        with pytest.raises(CacheWriteError):
            cache.persist(ServiceRegistry())
        assert not cache.exists()

    @staticmethod
    def test_load_missing_raises(tmp_path: Path):
        """Loading an absent artifact is fatal."""
        cache = ContainerCache(tmp_path / "container_x.yml", YamlCompiler())
        with pytest.raises(CacheLoadError):
            cache.load()

    @staticmethod
    def test_load_corrupt_raises(tmp_path: Path):
        """Loading a corrupt artifact is fatal and names the file."""
        path = tmp_path / "container_x.yml"
        path.write_text("{truncated", encoding="utf-8")
        with pytest.raises(CacheLoadError, match="container_x.yml"):
            ContainerCache(path, YamlCompiler()).load()

    @staticmethod
    def test_clear(tmp_path: Path, compiled):
        """Clearing removes the artifact once."""
        cache = ContainerCache(tmp_path / "container_x.yml", YamlCompiler())
        cache.persist(compiled)
        assert cache.clear() is True
        assert not cache.exists()
        assert cache.clear() is False
