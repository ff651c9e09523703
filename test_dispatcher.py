"""
测试工具分发器

覆盖单条分发、批量分发（顺序、fail-fast、并发度）、超时与调用日志
"""

import asyncio
import contextvars
import time
from pathlib import Path

import pytest

from multitool.config.tool_config import ToolConfig
from multitool.core.dispatcher import AnnotatedResult, InvocationRecord, ToolDispatcher
from multitool.core.tool_context import get_call_logs, reset_call_logs
from multitool.core.tool_errors import ToolArgumentsError, ToolTimeoutError, UnknownToolError
from multitool.tools.math_tools import TwoIntegersInput, build_math_registry
from multitool.tools.registry import ToolRegistry
from multitool.tools.tool_spec import ToolSpec


def _write_tool_yaml(tmp_path: Path, body: str) -> ToolConfig:
    path = tmp_path / "tool.yaml"
    path.write_text(body, encoding="utf-8")
    return ToolConfig(path)


@pytest.fixture
def math_dispatcher():
    return ToolDispatcher(build_math_registry())


class TestScenarios:
    def test_multiply(self, math_dispatcher):
        results = math_dispatcher.dispatch_all(
            [{"type": "multiply", "args": {"firstInt": 23, "secondInt": 7}}]
        )
        assert [r.model_dump(exclude_none=True) for r in results] == [
            {"type": "multiply", "args": {"firstInt": 23, "secondInt": 7}, "output": "161"}
        ]

    def test_add_large_numbers(self, math_dispatcher):
        result = math_dispatcher.dispatch(
            {"type": "add", "args": {"firstInt": 1000000, "secondInt": 1000000000}}
        )
        assert result.output == "1001000000"

    def test_exponentiate(self, math_dispatcher):
        result = math_dispatcher.dispatch({"type": "exponentiate", "args": {"base": 2, "exponent": 10}})
        assert result.output == "1024"

    def test_unknown_tool(self, math_dispatcher):
        with pytest.raises(UnknownToolError) as exc_info:
            math_dispatcher.dispatch_all([{"type": "divide", "args": {"firstInt": 1, "secondInt": 2}}])
        assert exc_info.value.tool_name == "divide"
        assert exc_info.value.code == "unknown_tool"

    def test_invalid_arguments(self, math_dispatcher):
        with pytest.raises(ToolArgumentsError):
            math_dispatcher.dispatch({"type": "exponentiate", "args": {"base": 2, "exponent": -1}})

    def test_exponentiate_result_too_large(self, math_dispatcher):
        with pytest.raises(ToolArgumentsError) as exc_info:
            math_dispatcher.dispatch({"type": "exponentiate", "args": {"base": 10, "exponent": 5000}})
        assert exc_info.value.code == "invalid_tool_arguments"

    def test_exponentiate_below_result_limit(self, math_dispatcher):
        result = math_dispatcher.dispatch({"type": "exponentiate", "args": {"base": 2, "exponent": 10000}})
        assert len(result.output) == 3011

    @pytest.mark.parametrize("base, expected", [(0, "0"), (1, "1"), (-1, "1")])
    def test_exponentiate_trivial_bases_allow_large_exponent(self, math_dispatcher, base, expected):
        result = math_dispatcher.dispatch(
            {"type": "exponentiate", "args": {"base": base, "exponent": 10**9}}
        )
        assert result.output == expected


class TestDispatch:
    def test_handler_receives_exact_args(self):
        calls = []

        def record(**kwargs):
            calls.append(kwargs)
            return "done"

        dispatcher = ToolDispatcher(ToolRegistry([ToolSpec(name="record", description="", handler=record)]))
        args = {"a": 1, "b": [1, 2], "c": {"nested": True}}
        result = dispatcher.dispatch(InvocationRecord(type="record", args=args))

        assert calls == [args]
        assert isinstance(result, AnnotatedResult)
        assert result.type == "record"
        assert result.args == args
        assert result.output == "done"

    def test_id_passthrough_and_extra_keys_ignored(self, math_dispatcher):
        result = math_dispatcher.dispatch(
            {"type": "add", "args": {"firstInt": 1, "secondInt": 2}, "id": "call_1", "extra": "x"}
        )
        assert result.id == "call_1"
        assert result.output == "3"

    def test_idempotent_for_pure_handler(self, math_dispatcher):
        record = {"type": "multiply", "args": {"firstInt": 6, "secondInt": 7}}
        assert math_dispatcher.dispatch(record) == math_dispatcher.dispatch(record)

    def test_handler_error_propagates_unchanged(self):
        class Boom(Exception):
            pass

        def explode():
            raise Boom("bad")

        dispatcher = ToolDispatcher(ToolRegistry([ToolSpec(name="explode", description="", handler=explode)]))
        with pytest.raises(Boom, match="bad"):
            dispatcher.dispatch({"type": "explode"})

    @pytest.mark.asyncio
    async def test_async_handler(self):
        async def shout(text: str) -> str:
            await asyncio.sleep(0)
            return text.upper()

        dispatcher = ToolDispatcher(ToolRegistry([ToolSpec(name="shout", description="", handler=shout)]))
        result = await dispatcher.adispatch({"type": "shout", "args": {"text": "hi"}})
        assert result.output == "HI"

    @pytest.mark.asyncio
    async def test_timeout(self, tmp_path):
        async def slow():
            await asyncio.sleep(5)

        config = _write_tool_yaml(tmp_path, "tools:\n  slow:\n    timeout: 0.05\n")
        dispatcher = ToolDispatcher(
            ToolRegistry([ToolSpec(name="slow", description="", handler=slow)]),
            tool_config=config,
        )
        with pytest.raises(ToolTimeoutError) as exc_info:
            await dispatcher.adispatch({"type": "slow"})
        assert exc_info.value.timeout == 0.05

    def test_rejects_invalid_max_concurrency(self, math_dispatcher):
        with pytest.raises(ValueError):
            ToolDispatcher(build_math_registry(), max_concurrency=0)


class TestBatch:
    def test_empty_batch(self, math_dispatcher):
        assert math_dispatcher.dispatch_all([]) == []

    def test_order_preserved(self, math_dispatcher):
        records = [
            {"type": "multiply", "args": {"firstInt": 2, "secondInt": 3}},
            {"type": "add", "args": {"firstInt": 2, "secondInt": 3}},
            {"type": "exponentiate", "args": {"base": 2, "exponent": 3}},
            {"type": "add", "args": {"firstInt": -1, "secondInt": 1}},
        ]
        results = math_dispatcher.dispatch_all(records)
        assert [(r.type, r.args) for r in results] == [(r["type"], r["args"]) for r in records]
        assert [r.output for r in results] == ["6", "5", "8", "0"]

    @pytest.mark.asyncio
    async def test_order_preserved_when_completion_order_differs(self):
        async def sleeper(delay: float) -> float:
            await asyncio.sleep(delay)
            return delay

        dispatcher = ToolDispatcher(ToolRegistry([ToolSpec(name="sleep", description="", handler=sleeper)]))
        delays = [0.06, 0.0, 0.03]
        results = await dispatcher.adispatch_all([{"type": "sleep", "args": {"delay": d}} for d in delays])
        assert [r.output for r in results] == delays

    def test_unknown_tool_aborts_before_any_handler_runs(self):
        calls = []

        def record(**kwargs):
            calls.append(kwargs)
            return "ok"

        dispatcher = ToolDispatcher(ToolRegistry([ToolSpec(name="record", description="", handler=record)]))
        with pytest.raises(UnknownToolError) as exc_info:
            dispatcher.dispatch_all(
                [
                    {"type": "record", "args": {"x": 1}},
                    {"type": "divide", "args": {}},
                ]
            )
        assert exc_info.value.tool_name == "divide"
        assert calls == []

    def test_invalid_arguments_abort_before_any_handler_runs(self):
        calls = []

        def record(first_int: int, second_int: int) -> str:
            calls.append((first_int, second_int))
            return "ok"

        registry = ToolRegistry(
            [ToolSpec(name="record", description="", handler=record, args_schema=TwoIntegersInput)]
        )
        with pytest.raises(ToolArgumentsError):
            ToolDispatcher(registry).dispatch_all(
                [
                    {"type": "record", "args": {"firstInt": 1, "secondInt": 2}},
                    {"type": "record", "args": {"firstInt": "one"}},
                ]
            )
        assert calls == []

    @pytest.mark.asyncio
    async def test_failure_cancels_in_flight_handlers(self):
        state = {"finished": False, "cancelled": False}

        async def slow():
            try:
                await asyncio.sleep(5)
                state["finished"] = True
            except asyncio.CancelledError:
                state["cancelled"] = True
                raise

        async def fail():
            await asyncio.sleep(0.01)
            raise RuntimeError("boom")

        dispatcher = ToolDispatcher(
            ToolRegistry(
                [
                    ToolSpec(name="slow", description="", handler=slow),
                    ToolSpec(name="fail", description="", handler=fail),
                ]
            )
        )
        with pytest.raises(RuntimeError, match="boom"):
            await dispatcher.adispatch_all([{"type": "slow"}, {"type": "fail"}])

        assert state == {"finished": False, "cancelled": True}

    @pytest.mark.asyncio
    async def test_runs_concurrently(self):
        state = {"active": 0, "peak": 0}

        async def work():
            state["active"] += 1
            state["peak"] = max(state["peak"], state["active"])
            await asyncio.sleep(0.05)
            state["active"] -= 1
            return "ok"

        dispatcher = ToolDispatcher(ToolRegistry([ToolSpec(name="work", description="", handler=work)]))
        start = time.perf_counter()
        await dispatcher.adispatch_all([{"type": "work"}] * 3)
        assert state["peak"] == 3
        assert time.perf_counter() - start < 0.15

    @pytest.mark.asyncio
    async def test_max_concurrency(self):
        state = {"active": 0, "peak": 0}

        async def work():
            state["active"] += 1
            state["peak"] = max(state["peak"], state["active"])
            await asyncio.sleep(0.01)
            state["active"] -= 1
            return "ok"

        dispatcher = ToolDispatcher(
            ToolRegistry([ToolSpec(name="work", description="", handler=work)]),
            max_concurrency=1,
        )
        results = await dispatcher.adispatch_all([{"type": "work"}] * 4)
        assert len(results) == 4
        assert state["peak"] == 1

    def test_max_concurrency_from_config(self, tmp_path):
        config = _write_tool_yaml(tmp_path, "dispatcher:\n  max_concurrency: 2\n")
        dispatcher = ToolDispatcher(build_math_registry(), tool_config=config)
        assert dispatcher.max_concurrency == 2


class TestCallLogs:
    @pytest.mark.parametrize("method", ["dispatch", "dispatch_all"])
    def test_sync_calls_visible_without_reset(self, math_dispatcher, method):
        record = {"type": "add", "args": {"firstInt": 1, "secondInt": 2}}
        payload = record if method == "dispatch" else [record]

        def run():
            getattr(math_dispatcher, method)(payload)
            return get_call_logs()

        # 全新上下文：调用前不存在日志列表
        logs = contextvars.Context().run(run)

        assert [(e["tool_name"], e["output_result"]) for e in logs] == [("add", "3")]

    def test_successful_calls_are_logged(self, math_dispatcher):
        reset_call_logs()
        math_dispatcher.dispatch_all(
            [
                {"type": "multiply", "args": {"firstInt": 23, "secondInt": 7}},
                {"type": "add", "args": {"firstInt": 1, "secondInt": 1}},
            ]
        )
        logs = get_call_logs()
        assert sorted(entry["tool_name"] for entry in logs) == ["add", "multiply"]
        multiply_entry = next(e for e in logs if e["tool_name"] == "multiply")
        assert multiply_entry["input_params"] == {"firstInt": 23, "secondInt": 7}
        assert multiply_entry["output_result"] == "161"
        assert multiply_entry["is_success"] is True
        assert multiply_entry["duration"] >= 0

    @pytest.mark.asyncio
    async def test_failed_call_is_logged(self):
        def explode():
            raise ValueError("nope")

        reset_call_logs()
        dispatcher = ToolDispatcher(ToolRegistry([ToolSpec(name="explode", description="", handler=explode)]))
        with pytest.raises(ValueError):
            await dispatcher.adispatch({"type": "explode"})

        (entry,) = get_call_logs()
        assert entry["is_success"] is False
        assert entry["level"] == "ERROR"
        assert "nope" in entry["error"]
