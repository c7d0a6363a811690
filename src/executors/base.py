"""Base executor class and interfaces."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional
import logging

from cronloop import CancellationSignal

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """Result of a job execution."""
    success: bool
    started_at: datetime
    finished_at: datetime
    duration: float  # seconds
    output: Any = None
    error: str = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "duration": self.duration,
            "output": self.output,
            "error": self.error
        }


class ExecutionFailed(RuntimeError):
    """Raised when an executor used as a cron job returns an unsuccessful result."""

    def __init__(self, result: ExecutionResult):
        self.result = result
        super().__init__(result.error or "Execution failed")


class BaseExecutor(ABC):
    """Base class for job executors.

    An executor bound to a config is a cron job: calling it with the run's
    cancellation signal executes the config once.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.last_result: Optional[ExecutionResult] = None

    @abstractmethod
    async def execute(self, config: Dict[str, Any]) -> ExecutionResult:
        """Execute the job with given configuration."""
        pass

    async def __call__(self, signal: CancellationSignal) -> ExecutionResult:
        if signal.cancelled:
            logger.debug("Skipping execution, cron already stopped")
            return self.last_result

        result = await self.execute(self.config)
        self.last_result = result
        if not result.success:
            raise ExecutionFailed(result)
        return result
