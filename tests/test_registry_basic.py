import pytest

from graphconv.edges import EdgeStore
from graphconv.errors import UsageError
from graphconv.formats import SnapFormat, format_for_path
from graphconv.registry import Registry, resolve_format


def test_register_get_list_roundtrip() -> None:
    registry = Registry()
    sentinel = object()

    registry.register("format", "dummy", sentinel)

    assert registry.get("format", "dummy") is sentinel
    assert registry.list("format") == ["dummy"]
    assert registry.values("format") == [sentinel]


def test_unknown_kind_error_is_clear() -> None:
    registry = Registry()

    with pytest.raises(KeyError) as exc:
        registry.get("unknown", "dummy")

    message = str(exc.value)
    assert "Unknown registry kind" in message
    assert "unknown" in message


def test_duplicate_registration_requires_overwrite() -> None:
    registry = Registry()
    registry.register("format", "f1", 1)

    with pytest.raises(ValueError) as exc:
        registry.register("format", "f1", 2)

    assert "already registered" in str(exc.value)

    registry.register("format", "f1", 2, overwrite=True)
    assert registry.get("format", "f1") == 2


def test_resolve_format_uses_private_registry(tmp_path) -> None:
    registry = Registry()

    with pytest.raises(UsageError) as exc:
        resolve_format("snap", registry=registry)
    assert "Available: <none>" in str(exc.value)

    registry.register("format", "snap", SnapFormat())
    assert format_for_path(tmp_path / "g.edges", registry=registry).name == "snap"


def test_module_exports_only_used_helpers() -> None:
    import graphconv.edges as edges_module
    import graphconv.registry as registry_module

    assert sorted(registry_module.__all__) == [
        "DEFAULT_KINDS",
        "Registry",
        "default_registry",
        "register",
        "resolve_format",
    ]
    assert not hasattr(registry_module, "get")
    assert not hasattr(edges_module, "vertex_set")
    assert not hasattr(EdgeStore, "replace_edges")
