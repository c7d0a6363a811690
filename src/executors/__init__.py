"""Executors that run commands as cron jobs."""

from .base import BaseExecutor, ExecutionFailed, ExecutionResult
from .bash_executor import BashExecutor

__all__ = [
    "BaseExecutor",
    "ExecutionFailed",
    "ExecutionResult",
    "BashExecutor"
]
