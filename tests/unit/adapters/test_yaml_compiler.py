"""Unit tests for the YAML registry compiler."""

import datetime as dt

import pytest

from bootkernel.adapters.compiler.yaml_dumper import FORMAT_VERSION, YamlCompiler
from bootkernel.adapters.registry.memory import Reference, ServiceRegistry
from bootkernel.interfaces.errors import CompilerError
from tests.fakes import Newsletter

# pylint: disable=redefined-outer-name
# pylint: disable=magic-value-comparison


@pytest.fixture
def compiled() -> ServiceRegistry:
    """A compiled registry with parameters, references and calls."""
    registry = ServiceRegistry({"app.name": "App", "app.debug": False})
    registry.set_parameter("footer", "Sent by %app.name%")
    registry.set_definition("mailer", {"class": "tests.fakes.Mailer", "arguments": ["smtp"]})
    registry.set_definition(
        "newsletter",
        {
            "class": "tests.fakes.Newsletter",
            "arguments": {"mailer": "@mailer", "sender": "news@example.org"},
            "calls": [["set_footer", ["%footer%"]]],
            "shared": False,
        },
    )
    registry.compile()
    return registry


def test_restored_registry_is_equivalent(compiled: ServiceRegistry):
    """Parameters and services survive a dump/load cycle."""
    compiler = YamlCompiler()
    restored = compiler.load(compiler.dump(compiled))

    assert restored.is_compiled
    assert dict(restored.parameters) == dict(compiled.parameters)
    assert restored.definitions["newsletter"].shared is False

    newsletter = restored.get("newsletter")
    assert isinstance(newsletter, Newsletter)
    assert newsletter.mailer.transport == "smtp"
    assert newsletter.footer == "Sent by App"


def test_references_are_tagged(compiled: ServiceRegistry):
    """Service references are stored as ``!service`` scalars."""
    text = YamlCompiler().dump(compiled)
    assert "!service" in text
    restored = YamlCompiler().load(text)
    assert restored.definitions["newsletter"].arguments["mailer"] == Reference("mailer")


def test_reference_lookalike_strings_stay_strings():
    """A parameter that merely looks like a tag is not turned into a reference."""
    registry = ServiceRegistry({"tag": "!service mailer", "at": "@mailer"})
    registry.compile()
    restored = YamlCompiler().load(YamlCompiler().dump(registry))
    assert restored.get_parameter("tag") == "!service mailer"
    assert restored.get_parameter("at") == "@mailer"


@pytest.mark.parametrize(
    "value",
    [
        dt.date(2024, 1, 1),
        dt.datetime(2024, 1, 1, 12, 30, tzinfo=dt.timezone.utc),
        {80: "http", 443: "https"},
        {True: "on", 1.5: "ratio"},
        {"a", "b"},
        b"\x00raw",
        "2024-01-01",
        "80",
        None,
    ],
)
def test_config_values_keep_their_type(value):
    """Values the config loader can produce come back equal and of the same type."""
    registry = ServiceRegistry({"value": value})
    registry.compile()
    restored = YamlCompiler().load(YamlCompiler().dump(registry)).get_parameter("value")
    assert restored == value
    assert type(restored) is type(value)


def test_dump_is_versioned(compiled: ServiceRegistry):
    """The document records its format version."""
    text = YamlCompiler().dump(compiled)
    assert text.startswith(f"format: {FORMAT_VERSION}\n")


def test_open_registry_is_rejected():
    """Only compiled registries can be dumped."""
    with pytest.raises(CompilerError, match="not been compiled"):
        YamlCompiler().dump(ServiceRegistry())


def test_unrepresentable_parameter_is_rejected():
    """Values no config layer could define are reported."""
    registry = ServiceRegistry({"handler": object()})
    registry.compile()
    with pytest.raises(CompilerError, match="not serializable"):
        YamlCompiler().dump(registry)


@pytest.mark.parametrize(
    "text",
    [
        "{not: [yaml",
        "[]",
        "format: 999\nparameters: {}\nservices: {}\n",
        "format: 1\nparameters: {}\n",
        "format: 1\nparameters: {}\nservices: {app: {class: x.Y}}\n",
        "format: 1\nparameters: {x: !!python/name:os.system }\nservices: {}\n",
    ],
)
def test_corrupt_dumps_are_rejected(text: str):
    """Corrupt, unsafe or incompatible documents raise CompilerError."""
    with pytest.raises(CompilerError):
        YamlCompiler().load(text)
