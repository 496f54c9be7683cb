"""Factory for building executors from configuration.

Supports plain dicts (e.g. the ``executor`` section of a YAML/JSON run file)
and :class:`ExecutorConfig` instances.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

from cmaopt.engine.interfaces import Evaluator, Executor

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ExecutorConfig:
    """Base configuration for executors.

    Attributes
    ----------
    executor_type : str
        Type of executor: "local" or "pool".
    mode : str
        Pool mode: "auto", "thread" or "process".
    num_workers : int | str
        Number of worker processes/threads, or "auto".
    batch_size : int | None
        Vectors per ``evaluate_batch`` call.
    """

    executor_type: str = "local"
    mode: str = "auto"
    num_workers: int | str = "auto"
    batch_size: int | None = None


class ExecutorFactory:
    """Factory for creating executors from configurations.

    Example
    -------
    >>> executor = ExecutorFactory.build({"executor_type": "pool", "num_workers": 4}, evaluator)
    """

    @classmethod
    def build(cls, config: dict[str, Any] | ExecutorConfig | None, evaluator: Evaluator) -> Executor:
        """Build an executor from configuration.

        Raises
        ------
        ValueError
            If executor type unknown or config invalid.
        """
        if config is None:
            cfg_dict: dict[str, Any] = {}
        elif isinstance(config, ExecutorConfig):
            cfg_dict = asdict(config)
        elif isinstance(config, dict):
            cfg_dict = config
        else:
            raise ValueError(f"Invalid config type: {type(config)}")

        executor_type = str(cfg_dict.get("executor_type", "local")).lower()

        if executor_type == "local":
            return cls._build_local_executor(cfg_dict, evaluator)
        elif executor_type == "pool":
            return cls._build_pool_executor(cfg_dict, evaluator)
        else:
            raise ValueError(f"Unknown executor type: {executor_type}. Available: local, pool")

    @classmethod
    def _build_local_executor(cls, config: dict[str, Any], evaluator: Evaluator) -> Executor:
        from cmaopt.engine.executors.local import LocalExecutor

        return LocalExecutor(evaluator=evaluator, batch_size=config.get("batch_size"))

    @classmethod
    def _build_pool_executor(cls, config: dict[str, Any], evaluator: Evaluator) -> Executor:
        from cmaopt.engine.executors.pool import LocalPoolExecutor

        mode = config.get("mode", "auto")
        if mode not in {"auto", "thread", "process"}:
            raise ValueError(f"Unknown pool mode: {mode}")
        _LOGGER.debug("Building pool executor mode=%s workers=%s", mode, config.get("num_workers"))
        return LocalPoolExecutor(
            evaluator=evaluator,
            mode=mode,
            num_workers=config.get("num_workers", "auto"),
            batch_size=config.get("batch_size") or 1,
        )


__all__ = [
    "ExecutorConfig",
    "ExecutorFactory",
]
