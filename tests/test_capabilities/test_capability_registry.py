"""Tests for capability registration, lookup and delegated execution."""

import pytest

from rahl.capabilities import (
    CapabilityExecutionError,
    CapabilityInfo,
    CapabilityLoadError,
    CapabilityNotFoundError,
    CapabilityRegistry,
)


class Named:
    def __init__(self, name, description=None):
        self.name = name
        if description is not None:
            self.description = description

    def execute(self, input, options=None):
        return {"from": self.name, "input": input}


class TestRegistration:
    def test_get_returns_same_instance(self, registry, calculator, search):
        assert registry.get("calculator") is calculator
        assert registry.get("web_search") is search

    def test_get_missing_returns_none(self, registry):
        assert registry.get("nonexistent") is None

    def test_last_registration_wins(self):
        reg = CapabilityRegistry()
        first, second = Named("echo"), Named("echo")
        reg.register(first)
        reg.register(second)
        assert reg.count() == 1
        assert len(reg.list()) == 1
        assert reg.get("echo") is second

    def test_contains_and_names(self, registry):
        assert "calculator" in registry
        assert "nope" not in registry
        assert registry.names() == ["calculator", "web_search", "code_executor"]
        assert len(registry) == 3

    def test_rejects_missing_name(self):
        reg = CapabilityRegistry()
        with pytest.raises(CapabilityLoadError):
            reg.register(Named(""))

    def test_get_unhashable_returns_none(self, registry):
        assert registry.get(["calculator"]) is None
        assert registry.get({"name": "calculator"}) is None
        assert registry.get(None) is None
        assert ["calculator"] not in registry

    def test_rejects_non_string_description(self):
        class NumericDescription:
            name = "odd"
            description = 123

            def execute(self, input, options=None):
                return input

        reg = CapabilityRegistry()
        with pytest.raises(CapabilityLoadError, match="description"):
            reg.register(NumericDescription())
        assert reg.get("odd") is None
        assert list(reg.list()) == []

    def test_rejects_missing_execute(self):
        class NoExecute:
            name = "broken"

        with pytest.raises(CapabilityLoadError, match="execute"):
            CapabilityRegistry().register(NoExecute())

    @pytest.mark.asyncio
    async def test_order_only_affects_listing(self):
        a, b = Named("a"), Named("b")
        forward, backward = CapabilityRegistry(), CapabilityRegistry()
        forward.register(a)
        forward.register(b)
        backward.register(b)
        backward.register(a)

        assert forward.get("a") is backward.get("a")
        assert await forward.execute("b", 1) == await backward.execute("b", 1)
        assert [i.name for i in forward.list()] == ["a", "b"]
        assert [i.name for i in backward.list()] == ["b", "a"]


class TestListing:
    def test_list_yields_info(self, registry):
        infos = list(registry.list())
        assert all(isinstance(i, CapabilityInfo) for i in infos)
        assert infos[0] == CapabilityInfo(
            name="calculator", description="Perform mathematical calculations", version="1.0.0",
        )

    def test_missing_description_defaults(self, registry):
        info = {i.name: i for i in registry.list()}["code_executor"]
        assert info.description == "No description"
        assert info.version is None

    def test_catalog_is_restartable(self, registry):
        catalog = registry.list()
        assert [i.name for i in catalog] == [i.name for i in catalog]

    def test_catalog_is_a_snapshot(self):
        reg = CapabilityRegistry()
        reg.register(Named("a"))
        catalog = reg.list()
        reg.register(Named("b"))
        assert len(catalog) == 1
        assert len(reg.list()) == 2

    def test_to_list(self, registry):
        rows = registry.list().to_list()
        assert rows[1] == {"name": "web_search", "description": "Search the web for information", "version": None}


class TestExecute:
    @pytest.mark.asyncio
    async def test_unknown_capability(self, registry, calculator, search):
        with pytest.raises(CapabilityNotFoundError) as exc_info:
            await registry.execute("nonexistent", "x")
        assert exc_info.value.capability == "nonexistent"
        assert calculator.calls == []
        assert search.calls == []

    @pytest.mark.asyncio
    async def test_unhashable_name_is_not_found(self, registry):
        with pytest.raises(CapabilityNotFoundError):
            await registry.execute(["calculator"], "2+2")

    @pytest.mark.asyncio
    async def test_sync_capability_result_returned_unchanged(self, registry, calculator):
        result = await registry.execute("calculator", "2+2")
        assert result == {"success": True, "expression": "2+2", "result": "4", "formatted": "4", "source": "calculator"}
        assert calculator.calls == [("2+2", {})]

    @pytest.mark.asyncio
    async def test_capability_failure_shape_passes_through(self, registry):
        result = await registry.execute("calculator", "2+")
        assert result == {"success": False, "error": "Cannot evaluate '2+'", "expression": "2+"}

    @pytest.mark.asyncio
    async def test_async_capability_is_awaited(self, registry):
        result = await registry.execute("web_search", "cats", {"limit": 2})
        assert result["results"] == ["result 0", "result 1"]

    @pytest.mark.asyncio
    async def test_options_default_to_empty(self, registry, search):
        await registry.execute("web_search", "cats")
        assert search.calls == [("cats", {})]

    @pytest.mark.asyncio
    async def test_raised_error_keeps_message_and_detail(self, registry):
        with pytest.raises(CapabilityExecutionError) as exc_info:
            await registry.execute("code_executor", "print(")
        err = exc_info.value
        assert err.message == "SyntaxError: invalid syntax (line 1)"
        assert str(err) == "SyntaxError: invalid syntax (line 1)"
        assert err.capability == "code_executor"
        assert err.detail == {"line": 1}
        assert type(err.__cause__).__name__ == "DetailError"

    @pytest.mark.asyncio
    async def test_execution_error_is_not_rewrapped(self):
        class Raiser:
            name = "raiser"

            async def execute(self, input, options=None):
                raise CapabilityExecutionError("upstream quota exceeded", "raiser", {"retry_after": 30})

        reg = CapabilityRegistry()
        reg.register(Raiser())
        with pytest.raises(CapabilityExecutionError) as exc_info:
            await reg.execute("raiser", None)
        assert exc_info.value.detail == {"retry_after": 30}
        assert exc_info.value.__cause__ is None
