"""Tests for the method registry and built-in chain methods."""

import threading
from typing import Any

import pytest

from chainipc.config.models import ChainConfig, ChainIPCConfig
from chainipc.rpc.methods import build_default_registry
from chainipc.rpc.methods.chain import block_hash, register_chain_methods
from chainipc.rpc.protocol import Request
from chainipc.rpc.registry import InvalidParams, MethodError, MethodRegistry, Outcome


def _request(method: str, params: list[Any] | None = None) -> Request:
    return Request(id=1, method=method, params=params or [])


class TestMethodRegistry:
    """Tests for MethodRegistry."""

    def test_lookup(self):
        async def echo(params: list[Any]) -> list[Any]:
            return params

        registry = MethodRegistry({"echo": echo})
        assert registry.lookup("echo") is echo
        assert registry.lookup("missing") is None
        assert "echo" in registry
        assert len(registry) == 1

    def test_is_read_only(self):
        registry = MethodRegistry({"a": lambda params: 1})
        with pytest.raises(TypeError):
            registry._methods["b"] = lambda params: 2  # type: ignore[index]

    def test_copies_source_mapping(self):
        methods = {"a": lambda params: 1}
        registry = MethodRegistry(methods)
        methods["b"] = lambda params: 2
        assert "b" not in registry

    def test_names_sorted(self):
        registry = MethodRegistry({"b": lambda p: 1, "a": lambda p: 2})
        assert registry.names == ["a", "b"]


class TestDispatch:
    """Tests for MethodRegistry.dispatch."""

    @pytest.mark.asyncio
    async def test_unknown_method(self):
        outcome = await MethodRegistry().dispatch(_request("frobnicate", [1, 2]))
        assert outcome == Outcome(result=None, error="Unknown method")

    @pytest.mark.asyncio
    async def test_async_handler(self):
        async def add(params: list[Any]) -> int:
            return params[0] + params[1]

        outcome = await MethodRegistry({"add": add}).dispatch(_request("add", [2, 3]))
        assert outcome.ok
        assert outcome.result == 5

    @pytest.mark.asyncio
    async def test_sync_handler_runs_in_thread(self):
        threads: list[int] = []

        def handler(params: list[Any]) -> str:
            threads.append(threading.get_ident())
            return "done"

        outcome = await MethodRegistry({"h": handler}).dispatch(_request("h"))
        assert outcome.result == "done"
        assert threads != [threading.get_ident()]

    @pytest.mark.asyncio
    async def test_method_error_becomes_outcome(self):
        async def fails(params: list[Any]) -> None:
            raise MethodError("nope")

        outcome = await MethodRegistry({"f": fails}).dispatch(_request("f"))
        assert outcome == Outcome.failure("nope")

    @pytest.mark.asyncio
    async def test_unexpected_fault_is_contained(self, caplog):
        async def crashes(params: list[Any]) -> None:
            raise RuntimeError("boom")

        outcome = await MethodRegistry({"c": crashes}).dispatch(_request("c"))
        assert outcome.error == "Internal error"
        assert outcome.result is None
        assert "RPC method error" in caplog.text

    @pytest.mark.asyncio
    async def test_null_result_is_success(self):
        async def nothing(params: list[Any]) -> None:
            return None

        outcome = await MethodRegistry({"n": nothing}).dispatch(_request("n"))
        assert outcome.ok
        assert outcome.result is None


class TestChainMethods:
    """Tests for getblockhash and getblockcount."""

    @pytest.fixture
    def registry(self) -> MethodRegistry:
        return build_default_registry(ChainIPCConfig())

    def test_registers_methods(self, registry):
        assert registry.names == ["getblockcount", "getblockhash"]

    def test_block_hash_is_fixed_width(self):
        assert block_hash(5) == "0000000000000000000005"
        assert block_hash(255) == "00000000000000000000ff"
        assert len(block_hash(0)) == 22

    @pytest.mark.asyncio
    async def test_getblockhash(self, registry):
        outcome = await registry.dispatch(_request("getblockhash", [5]))
        assert outcome == Outcome.success("0000000000000000000005")

    @pytest.mark.asyncio
    async def test_getblockhash_missing_height(self, registry):
        outcome = await registry.dispatch(_request("getblockhash", []))
        assert outcome.result is None
        assert "Missing parameter" in (outcome.error or "")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("height", ["5", 5.0, True, None, [5]])
    async def test_getblockhash_wrong_type(self, registry, height):
        outcome = await registry.dispatch(_request("getblockhash", [height]))
        assert outcome.error is not None

    @pytest.mark.asyncio
    async def test_getblockhash_negative(self, registry):
        outcome = await registry.dispatch(_request("getblockhash", [-1]))
        assert "non-negative" in (outcome.error or "")

    @pytest.mark.asyncio
    async def test_getblockcount(self, registry):
        outcome = await registry.dispatch(_request("getblockcount"))
        assert outcome == Outcome.success(84372)

    @pytest.mark.asyncio
    async def test_getblockcount_from_config(self):
        methods: dict[str, Any] = {}
        register_chain_methods(methods, ChainConfig(block_count=7))
        outcome = await MethodRegistry(methods).dispatch(_request("getblockcount"))
        assert outcome.result == 7

    @pytest.mark.asyncio
    async def test_invalid_params_is_method_error(self, registry):
        handler = registry.lookup("getblockhash")
        assert handler is not None
        with pytest.raises(InvalidParams):
            await handler([])
