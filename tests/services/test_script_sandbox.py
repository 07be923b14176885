"""Script Sandbox — QuickJS execution of extraction scripts.

Tests cover:
    - Returned arrays and the results accumulator
    - Thrown errors and non-array returns become failures, never exceptions
    - log() output is collected
    - Time and memory budgets stop runaway scripts; oversized output is rejected
    - A script tampering with JSON.stringify still yields a failure result
    - No state survives between runs
"""

import pytest

from app.infrastructure.script_sandbox import ScriptSandbox

RECORDS = [
    {"index": 0, "method": "GET", "status": 200},
    {"index": 1, "method": "POST", "status": 201},
    {"index": 2, "method": "GET", "status": 500},
]


def test_filter_script_returns_matching_records():
    result = ScriptSandbox().run(
        RECORDS, "return entries.filter(e => e.method === 'GET');",
    )
    assert result.success is True
    assert [r["index"] for r in result.data] == [0, 2]


def test_results_accumulator_used_when_nothing_returned():
    result = ScriptSandbox().run(
        RECORDS, "for (const e of entries) { results.push({id: 'n' + e.index}); }",
    )
    assert result.success is True
    assert result.data == [{"id": "n0"}, {"id": "n1"}, {"id": "n2"}]


def test_thrown_error_message_is_reported():
    result = ScriptSandbox().run(RECORDS, 'throw new Error("boom");')
    assert result.success is False
    assert result.error == "boom"
    assert result.to_dict() == {
        "success": False,
        "status": "error",
        "error_code": "SANDBOX_SCRIPT_ERROR",
        "error": "boom",
        "logs": [],
    }


def test_non_array_return_is_rejected():
    result = ScriptSandbox().run(RECORDS, "return 42;")
    assert result.success is False
    assert "must return an array" in result.error


def test_logs_are_collected():
    result = ScriptSandbox().run(
        RECORDS, "log('count', entries.length); return [];",
    )
    assert result.success is True
    assert result.logs == ["count 3"]


def test_syntax_error_is_a_failure():
    result = ScriptSandbox().run(RECORDS, "return entries.filter(e => ;")
    assert result.success is False
    assert result.error


def test_infinite_loop_hits_time_budget():
    result = ScriptSandbox(time_limit_seconds=0.2).run(RECORDS, "while (true) {}")
    assert result.success is False
    assert "time budget" in result.error


def test_runs_are_isolated():
    sandbox = ScriptSandbox()
    sandbox.run(RECORDS, "globalThis.leak = 1; return [];")
    result = sandbox.run(RECORDS, "return [typeof globalThis.leak];")
    assert result.data == ["undefined"]


def test_success_dict_carries_count():
    out = ScriptSandbox().run(RECORDS, "return entries.slice(0, 1);").to_dict()
    assert out["success"] is True
    assert out["count"] == 1
    assert out["data"][0]["index"] == 0


def test_memory_budget_stops_growing_script():
    result = ScriptSandbox(memory_limit_bytes=4 * 1024 * 1024).run(
        RECORDS, "const a = []; while (true) a.push('x'.repeat(1e5));",
    )
    assert result.success is False
    assert "memory budget" in result.error


def test_oversized_output_rejected():
    result = ScriptSandbox(max_output_chars=100).run(RECORDS, "return entries;")
    assert result.success is False
    assert "too large" in result.error


@pytest.mark.parametrize("replacement", ['"not json"', '"[1]"', '\'{"success": true, "data": 5}\''])
def test_replaced_stringify_is_a_failure(replacement):
    result = ScriptSandbox().run(
        RECORDS, f"JSON.stringify = () => {replacement}; return [];",
    )
    assert result.success is False
    assert result.to_dict()["error_code"] == "SANDBOX_SCRIPT_ERROR"
