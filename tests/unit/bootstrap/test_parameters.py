"""Unit tests for the registry seed parameters."""

from pathlib import Path

import pytest

from bootkernel.bootstrap.parameters import build_parameters, env_parameters
from bootkernel.bootstrap.paths import PathResolver

# pylint: disable=magic-value-comparison

APP_KEYS = {
    "app.name",
    "app.version",
    "app.environment",
    "app.sub_environment",
    "app.debug",
    "app.charset",
    "app.path",
    "app.config_path",
    "app.base_path",
    "app.storage_path",
    "app.log_path",
    "app.cache_path",
    "app.src_path",
}


def _build(environ):
    return build_parameters(
        name="App",
        version="1.0",
        environment="console",
        sub_environment="local",
        debug=False,
        charset="UTF-8",
        paths=PathResolver("/var/www/app").resolve(),
        environ=environ,
    )


def test_env_parameters_rewrites_names():
    """Double underscores become dots and names are lower-cased."""
    assert env_parameters({"MAILER__SMTP__HOST": "mx", "HOME": "/root"}) == {
        "mailer.smtp.host": "mx",
        "home": "/root",
    }


def test_all_app_keys_present():
    """Every kernel-derived key is present."""
    assert APP_KEYS <= set(_build({}))


def test_paths_are_strings():
    """Paths are rendered as strings for interpolation and serialization."""
    parameters = _build({})
    assert parameters["app.path"] == str(Path("/var/www/app"))
    assert parameters["app.cache_path"] == str(Path("/var/www/storage/cache"))


def test_environment_passthrough():
    """Process environment variables are exposed as parameters."""
    parameters = _build({"APPLICATION__NAME2": "YYY"})
    assert parameters["application.name2"] == "YYY"


def test_kernel_keys_win_over_environment():
    """An environment variable cannot shadow a kernel-derived key."""
    parameters = _build({"APP__NAME": "Evil", "APP__DEBUG": "1"})
    assert parameters["app.name"] == "App"
    assert parameters["app.debug"] is False


def test_build_is_idempotent():
    """Identical inputs give identical output."""
    environ = {"FOO": "bar"}
    assert dict(_build(environ)) == dict(_build(environ))


def test_result_is_read_only():
    """The parameter set cannot be mutated."""
    parameters = _build({})
    with pytest.raises(TypeError):
        parameters["app.name"] = "Other"  # type: ignore[index]
