from __future__ import annotations

import pytest

from hb_sdk import ArityMismatchError, HelperConfigError, HelperRegistry, HelperSignature, make_helper


def test_register_and_lookup(registry: HelperRegistry) -> None:
    helper = registry.register("greet", lambda who: f"hi {who}", params=("str",))
    assert registry.get("greet") is helper
    assert "greet" in registry
    assert len(registry) == 1
    assert registry.names() == ("greet",)
    assert helper.signature == HelperSignature(params=("str",))


def test_duplicate_names_need_replace(registry: HelperRegistry) -> None:
    registry.register("greet", lambda: "one")
    with pytest.raises(HelperConfigError, match="already registered"):
        registry.register("greet", lambda: "two")
    registry.register("greet", lambda: "two", replace=True)
    assert registry.get("greet").fn() == "two"


@pytest.mark.parametrize("name", ["", "  ", "a.b", "a/b", "two words", "@index"])
def test_invalid_names_are_rejected(registry: HelperRegistry, name: str) -> None:
    with pytest.raises(HelperConfigError):
        registry.register(name, lambda: "")


def test_decorator_registers_and_returns_function(registry: HelperRegistry) -> None:
    @registry.helper(params=("int", "int"))
    def add(left, right):
        return left + right

    assert add(1, 2) == 3
    assert registry.get("add").signature.params == ("int", "int")

    @registry.helper("shout", params=("str",))
    def _upper(text):
        return text.upper()

    assert "shout" in registry and "_upper" not in registry


def test_snapshot_is_read_only_and_detached(registry: HelperRegistry) -> None:
    registry.register("one", lambda: "1")
    snapshot = registry.snapshot()
    registry.register("two", lambda: "2")
    assert "two" not in snapshot
    with pytest.raises(TypeError):
        snapshot["three"] = make_helper(lambda: "3", name="three")  # type: ignore[index]


def test_raw_signature_requires_options() -> None:
    with pytest.raises(HelperConfigError, match="invalid signature"):
        make_helper(lambda options: "", raw=True, name="raw")
    helper = make_helper(lambda options: "", raw=True, options=True, name="raw")
    assert helper.signature.raw and helper.signature.slots == 1


def test_unknown_parameter_kind_is_rejected() -> None:
    with pytest.raises(HelperConfigError):
        make_helper(lambda value: value, params=("decimal",), name="bad")  # type: ignore[arg-type]


def test_non_callables_are_rejected() -> None:
    with pytest.raises(HelperConfigError, match="not callable"):
        make_helper("nope", name="nope")  # type: ignore[arg-type]


def test_callable_must_accept_declared_slots() -> None:
    with pytest.raises(ArityMismatchError):
        make_helper(lambda: "", params=("any",), name="short")
    with pytest.raises(ArityMismatchError):
        make_helper(lambda a, b: "", params=("any",), name="long")
    with pytest.raises(ArityMismatchError):
        make_helper(lambda value: "", params=("any",), options=True, name="no_options")

    variadic = make_helper(lambda *args: len(args), params=("any", "any"), name="variadic")
    assert variadic.call([1, 2], None) == 2


def test_helper_call_appends_options_only_when_declared() -> None:
    sentinel = object()
    plain = make_helper(lambda value: value, params=("any",), name="plain")
    block = make_helper(lambda value, options: (value, options), params=("any",), options=True, name="block")
    assert plain.call(["x"], sentinel) == "x"
    assert block.call(["x"], sentinel) == ("x", sentinel)
