import asyncio
import logging
from typing import Any, Awaitable, Dict, List, Optional
from fleetstock.core.config import STEP_TIMEOUT_SECONDS
from fleetstock.core.errors import PartialFailure

log = logging.getLogger("fleetstock.steps")


class StepLog:
    """
    Ordered record of the steps one operation has executed.

    Every step runs under the operation's deadline; a timeout counts as that
    step failing. Database steps are undone by the surrounding transaction when
    a later step fails, but steps marked `external` (a write committed by a
    non-transactional collaborator) are not, and they turn the failure into a
    PartialFailure so the caller knows what is left over.
    """

    def __init__(self, operation: str, timeout: Optional[float] = None):
        self.operation = operation
        self.timeout = STEP_TIMEOUT_SECONDS if timeout is None else timeout
        self.completed: List[str] = []
        self.external: List[str] = []
        self.results: Dict[str, Any] = {}
        self.failed_step: Optional[str] = None

    async def run(self, step: str, awaitable: Awaitable, external: bool = False) -> Any:
        try:
            result = await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError:
            self.failed_step = step
            log.error(f"{self.operation}: step '{step}' timed out after {self.timeout}s")
            raise
        except Exception:
            self.failed_step = step
            raise

        self.completed.append(step)
        self.results[step] = result
        if external:
            self.external.append(step)
        return result

    def raise_if_partial(self, exc: BaseException):
        """Re-raises `exc` as a PartialFailure when an external step already committed."""
        if not self.external:
            return
        # Outside a step only the transaction exit can fail
        step = self.failed_step or "commit"
        failure = PartialFailure(
            operation=self.operation,
            step=step,
            completed_steps=list(self.external),
            results={name: self.results[name] for name in self.external},
            cause=exc,
        )
        log.error(failure.message)
        raise failure from exc
