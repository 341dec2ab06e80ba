"""
Handover AI Advisory — Time-Bounded Gateway
=============================================
Every advisory call goes through here:

1. Guardrail check (read-only actions only)
2. Run the port call on a worker thread
3. Wait at most advisory_timeout_seconds
4. Map timeout / error / blank output to a failed AdvisoryResult

The gateway never raises for a port failure and never writes state.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from ai.advisory.port import AdvisoryPort
from ai.guardrails import AIActionType, check_ai_guardrail

logger = logging.getLogger("handover.advisory")


# ══════════════════════════════════════════════════════════════
# RESULT
# ══════════════════════════════════════════════════════════════

class AdvisoryErrorCode:
    ADVISORY_TIMEOUT = "ADVISORY_TIMEOUT"
    ADVISORY_FAILED = "ADVISORY_FAILED"
    ADVISORY_EMPTY = "ADVISORY_EMPTY"
    ADVISORY_FORBIDDEN = "ADVISORY_FORBIDDEN"


@dataclass(frozen=True)
class AdvisoryResult:
    ok: bool
    text: str = ""
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def __post_init__(self):
        if self.ok and self.error_code is not None:
            raise ValueError("A successful AdvisoryResult carries no error_code.")
        if not self.ok and self.error_code is None:
            raise ValueError("A failed AdvisoryResult must carry an error_code.")

    @classmethod
    def success(cls, text: str) -> "AdvisoryResult":
        return cls(ok=True, text=text)

    @classmethod
    def failure(cls, code: str, message: str) -> "AdvisoryResult":
        return cls(ok=False, error_code=code, error_message=message)


# ══════════════════════════════════════════════════════════════
# GATEWAY
# ══════════════════════════════════════════════════════════════

class AdvisoryGateway:
    """
    A timed-out call keeps its worker until the port returns, so hung
    calls eat into the pool. in_flight counts calls submitted and not
    yet finished; once it reaches max_workers new calls queue behind
    the hung ones and a saturation warning is logged.
    """

    def __init__(
        self,
        port: AdvisoryPort,
        *,
        timeout_seconds: float = 10.0,
        max_workers: int = 4,
        executor: Optional[Executor] = None,
    ):
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive.")
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1.")
        self._port = port
        self._timeout = timeout_seconds
        self._max_workers = max_workers
        self._in_flight = 0
        self._lock = threading.Lock()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="handover-advisory",
        )

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False)

    def _run(self, fn: Callable[..., str], *args: Any) -> str:
        try:
            return fn(*args)
        finally:
            self._release()

    def _release(self) -> None:
        with self._lock:
            self._in_flight -= 1

    def _call(
        self,
        action_type: AIActionType,
        operation_name: str,
        fn: Callable[..., str],
        *args: Any,
    ) -> AdvisoryResult:
        guardrail = check_ai_guardrail(action_type, operation_name)
        if not guardrail.allowed:
            logger.warning(f"Advisory call blocked: {guardrail.reason}")
            return AdvisoryResult.failure(
                AdvisoryErrorCode.ADVISORY_FORBIDDEN, guardrail.reason,
            )

        with self._lock:
            busy = self._in_flight
            self._in_flight += 1
        if busy >= self._max_workers:
            logger.warning(
                f"Advisory pool saturated: {busy} calls still running on "
                f"{self._max_workers} workers; {operation_name} will queue"
            )

        future = self._executor.submit(self._run, fn, *args)
        try:
            text = future.result(timeout=self._timeout)
        except FutureTimeoutError:
            if future.cancel():
                # never started, so _run will not release it
                self._release()
            logger.warning(
                f"Advisory {operation_name} timed out after {self._timeout}s"
            )
            return AdvisoryResult.failure(
                AdvisoryErrorCode.ADVISORY_TIMEOUT,
                f"No answer within {self._timeout} seconds.",
            )
        except Exception as exc:
            logger.error(
                f"Advisory {operation_name} failed: {exc}", exc_info=True,
            )
            return AdvisoryResult.failure(
                AdvisoryErrorCode.ADVISORY_FAILED, str(exc) or type(exc).__name__,
            )

        if not isinstance(text, str) or not text.strip():
            logger.info(f"Advisory {operation_name} returned no text")
            return AdvisoryResult.failure(
                AdvisoryErrorCode.ADVISORY_EMPTY, "The advisory service returned no text.",
            )
        return AdvisoryResult.success(text.strip())

    def suggest_resolution(self, dispute_context: Dict[str, Any]) -> AdvisoryResult:
        return self._call(
            AIActionType.RECOMMEND,
            "disputes.suggestion.request",
            self._port.suggest_resolution,
            dispute_context,
        )

    def answer_delivery_question(
        self, delivery_context: Dict[str, Any], question: str,
    ) -> AdvisoryResult:
        return self._call(
            AIActionType.ANALYZE,
            "delivery.assistant.ask",
            self._port.answer_delivery_question,
            delivery_context,
            question,
        )
