"""Script Sandbox — runs model-authored JavaScript over dataset records in QuickJS.

Invariants:
    - Every run gets a fresh quickjs.Context: no state survives between runs
    - Records cross the boundary as a JSON string, results come back the same way
    - The context exposes no network, filesystem or host objects
    - Time and memory budgets are enforced by the engine itself
    - run() never raises: every failure becomes SandboxResult(success=False)
    - Failure dicts carry error_code SANDBOX_SCRIPT_ERROR like any other tool error

Design Decisions:
    - Embedded engine over a subprocess/container: scripts are short filters
      and mappers over already-loaded data, startup must be milliseconds
    - Script contract: `entries` in, `results` accumulator or returned array out,
      `log(...)` collected into `logs`
"""

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any

import quickjs

from app.core.errors import SandboxScriptError

logger = logging.getLogger(__name__)

_WRAPPER = """
(function (entries) {
    const results = [];
    const logs = [];
    const log = (...parts) => {
        logs.push(parts.map(p => typeof p === "string" ? p : JSON.stringify(p)).join(" "));
    };
    try {
        const returned = (function () {
%(code)s
        })();
        if (returned !== undefined && !Array.isArray(returned)) {
            return JSON.stringify({
                success: false,
                error: "Script must return an array or push onto results, got " + typeof returned,
                logs: logs,
            });
        }
        return JSON.stringify({
            success: true,
            data: Array.isArray(returned) ? returned : results,
            logs: logs,
        });
    } catch (e) {
        return JSON.stringify({
            success: false,
            error: (e && e.message) ? e.message : String(e),
            logs: logs,
        });
    }
})(JSON.parse(%(payload)s))
"""


@dataclass
class SandboxResult:
    """Outcome of one script run."""

    success: bool
    data: list[Any] = field(default_factory=list)
    logs: list[str] = field(default_factory=list)
    error: str | None = None
    duration_ms: int = 0

    def to_dict(self) -> dict:
        if self.success:
            return {
                "success": True,
                "count": len(self.data),
                "data": self.data,
                "logs": self.logs,
            }
        return {
            "success": False,
            **SandboxScriptError(self.error or "Script failed").to_tool_result(),
            "logs": self.logs,
        }


class ScriptSandbox:
    """Executes transformation scripts with wall-clock and memory budgets."""

    def __init__(
        self,
        time_limit_seconds: float = 2.0,
        memory_limit_bytes: int = 64 * 1024 * 1024,
        max_output_chars: int = 2_000_000,
    ):
        self.time_limit_seconds = time_limit_seconds
        self.memory_limit_bytes = memory_limit_bytes
        self.max_output_chars = max_output_chars

    def run(self, records: list[dict], code: str) -> SandboxResult:
        started = time.monotonic()
        result = self._run(records, code)
        result.duration_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            "Sandbox run finished: success=%s records=%d duration_ms=%d",
            result.success, len(records), result.duration_ms,
        )
        return result

    def _run(self, records: list[dict], code: str) -> SandboxResult:
        try:
            payload = json.dumps(json.dumps(records, default=str))
        except (TypeError, ValueError) as e:
            return SandboxResult(success=False, error=f"Records not serializable: {e}")

        ctx = quickjs.Context()
        ctx.set_time_limit(self.time_limit_seconds)
        ctx.set_memory_limit(self.memory_limit_bytes)
        try:
            raw = ctx.eval(_WRAPPER % {"code": code, "payload": payload})
        except quickjs.JSException as e:
            return SandboxResult(success=False, error=self._engine_error(str(e)))
        except MemoryError:
            return SandboxResult(success=False, error=self._memory_message())

        if not isinstance(raw, str):
            return SandboxResult(success=False, error="Script produced no result")
        if len(raw) > self.max_output_chars:
            return SandboxResult(
                success=False,
                error=(
                    f"Script output too large ({len(raw)} chars, "
                    f"limit {self.max_output_chars})"
                ),
            )
        return self._parse_outcome(raw)

    def _parse_outcome(self, raw: str) -> SandboxResult:
        # The script can replace JSON.stringify: the wrapper output is untrusted
        try:
            outcome = json.loads(raw)
        except ValueError:
            return SandboxResult(success=False, error="Script result is not valid JSON")
        if not isinstance(outcome, dict):
            return SandboxResult(success=False, error="Script result has an unexpected shape")

        logs = outcome.get("logs")
        logs = [str(line) for line in logs] if isinstance(logs, list) else []
        error = outcome.get("error")
        if error:
            return SandboxResult(
                success=False, logs=logs, error=self._engine_error(str(error)),
            )
        data = outcome.get("data")
        if outcome.get("success") is not True or not isinstance(data, list):
            return SandboxResult(
                success=False, logs=logs, error="Script result has an unexpected shape",
            )
        return SandboxResult(success=True, data=data, logs=logs)

    def _engine_error(self, message: str) -> str:
        if "interrupted" in message:
            return f"Script exceeded time budget ({self.time_limit_seconds}s)"
        if "out of memory" in message:
            return self._memory_message()
        return message

    def _memory_message(self) -> str:
        mib = self.memory_limit_bytes / (1024 * 1024)
        return f"Script exceeded memory budget ({mib:g} MiB)"
