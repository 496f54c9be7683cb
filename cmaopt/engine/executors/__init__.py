"""Evaluation executors."""

from .factory import ExecutorConfig, ExecutorFactory
from .local import LocalExecutor
from .pool import LocalPoolExecutor

__all__ = ["ExecutorConfig", "ExecutorFactory", "LocalExecutor", "LocalPoolExecutor"]
