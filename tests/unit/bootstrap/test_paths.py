"""Unit tests for the directory layout resolver."""

from pathlib import Path

import pytest

from bootkernel.bootstrap.paths import AppPaths, PathResolver, derive_name

# pylint: disable=magic-value-comparison


class TestDefaults:
    """Every path derives from the application root."""

    @staticmethod
    def test_layout_from_app_path():
        """Derived paths follow the conventional layout."""
        resolver = PathResolver("/var/www/app")
        assert resolver.app_path == Path("/var/www/app")
        assert resolver.base_path == Path("/var/www")
        assert resolver.config_path == Path("/var/www/app/config")
        assert resolver.storage_path == Path("/var/www/storage")
        assert resolver.log_path == Path("/var/www/storage/log")
        assert resolver.cache_path == Path("/var/www/storage/cache")
        assert resolver.src_path == Path("/var/www/src")

    @staticmethod
    def test_derived_paths_do_not_need_to_exist(tmp_path: Path):
        """Paths are not canonicalized, so missing directories still resolve."""
        resolver = PathResolver(tmp_path / "missing" / "app")
        assert resolver.cache_path == tmp_path / "missing" / "storage" / "cache"
        assert not resolver.cache_path.exists()

    @staticmethod
    def test_relative_app_path_is_made_absolute(tmp_path: Path, monkeypatch):
        """A relative root is anchored at the working directory."""
        monkeypatch.chdir(tmp_path)
        resolver = PathResolver("app")
        assert resolver.app_path == tmp_path / "app"
        assert resolver.base_path == tmp_path

    @staticmethod
    def test_trailing_separator_is_ignored():
        """``/var/www/app/`` and ``/var/www/app`` give the same layout."""
        assert PathResolver("/var/www/app/").base_path == Path("/var/www")

    @staticmethod
    def test_default_app_path_is_called_when_empty():
        """An empty root falls back to the default provider."""
        calls = []

        def default():
            calls.append(1)
            return "/opt/service"

        resolver = PathResolver("", default_app_path=default)
        assert resolver.app_path == Path("/opt/service")
        assert resolver.app_path == Path("/opt/service")
        assert calls == [1]

    @staticmethod
    def test_missing_app_path_without_default_raises():
        """Without a root or a default provider there is no layout."""
        with pytest.raises(ValueError):
            _ = PathResolver().app_path


class TestMemoization:
    """Paths are computed once and then kept."""

    @staticmethod
    def test_base_path_is_memoized(tmp_path: Path):
        """A second access returns the identical object even if the disk changed."""
        app = tmp_path / "project" / "app"
        resolver = PathResolver(app)
        first = resolver.base_path
        app.mkdir(parents=True)
        assert resolver.base_path is first

    @staticmethod
    def test_derived_paths_survive_root_change():
        """Changing the root does not recompute already resolved paths."""
        resolver = PathResolver("/var/www/app")
        _ = resolver.cache_path
        resolver.app_path = "/srv/other/app"
        assert resolver.app_path == Path("/srv/other/app")
        assert resolver.cache_path == Path("/var/www/storage/cache")
        # base_path was memoized through cache_path
        assert resolver.src_path == Path("/var/www/src")
        assert resolver.config_path == Path("/srv/other/app/config")


class TestOverrides:
    """Explicitly set paths win over derived defaults."""

    @staticmethod
    def test_storage_override_moves_log_and_cache():
        """Log and cache derive from the overridden storage path."""
        resolver = PathResolver("/var/www/app")
        resolver.storage_path = "/data/storage"
        assert resolver.log_path == Path("/data/storage/log")
        assert resolver.cache_path == Path("/data/storage/cache")

    @staticmethod
    def test_each_path_can_be_set():
        """Every path has a setter."""
        resolver = PathResolver("/var/www/app")
        resolver.config_path = "/etc/app"
        resolver.base_path = "/base"
        resolver.log_path = "/var/log/app"
        resolver.cache_path = "/tmp/cache"
        assert resolver.config_path == Path("/etc/app")
        assert resolver.storage_path == Path("/base/storage")
        assert resolver.log_path == Path("/var/log/app")
        assert resolver.cache_path == Path("/tmp/cache")
        assert resolver.src_path == Path("/base/src")

    @staticmethod
    def test_setting_empty_restores_default():
        """An empty value means unset, so the default is derived again."""
        resolver = PathResolver("/var/www/app")
        resolver.cache_path = "/tmp/cache"
        resolver.cache_path = ""
        assert resolver.cache_path == Path("/var/www/storage/cache")


def test_resolve_returns_consistent_snapshot():
    """`resolve` returns every path at once."""
    snapshot = PathResolver("/var/www/app").resolve()
    assert isinstance(snapshot, AppPaths)
    assert snapshot.base_path == Path("/var/www")
    assert snapshot.src_path == Path("/var/www/src")


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/srv/My-App!2", "MyApp2"),
        ("/srv/app", "App"),
        ("/srv/my_app", "My_app"),
        ("/srv/Kernel", "Kernel"),
        ("/srv/---", ""),
    ],
)
def test_derive_name(path: str, expected: str):
    """Non-word characters are stripped and the first letter is capitalized."""
    assert derive_name(path) == expected
