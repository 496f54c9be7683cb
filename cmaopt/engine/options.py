"""Advanced option resolution.

Callers hand the driver a loose ``name -> value`` mapping. It is parsed once
into :class:`AdvancedOptions` and then resolved, together with the driver's
own budgets, into the :class:`~cmaopt.engine.types.EngineParams` used to
initialize the strategy engine.

Recognized names (aliases in parentheses):

- ``population_size`` (``populationSize``, ``lambda``, ``popsize``)
- ``initial_step_size`` (``initialStepSize``, ``sigma``)
- ``seed``
- ``max_iterations`` (``maxIterations``, ``maxiter``)
- ``max_evaluations`` (``maxEvaluations``, ``stopMaxFunEvals``)
- ``function_tolerance`` (``functionTolerance``, ``stopTolFun``)
- ``max_time_fraction`` (``maxTimeFractionForDecomposition``,
  ``maxTimeFractionForEigendecomposition``)
- ``resume``

Unknown names are ignored.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass
from numbers import Integral, Real
from typing import Final

import numpy as np

from cmaopt.core.errors import InvalidOptionError
from cmaopt.engine.types import EngineParams, TerminationBudgets

_LOGGER = logging.getLogger(__name__)

DEFAULT_STEP_SIZE: Final = 0.1

_ALIASES: Final[dict[str, tuple[str, ...]]] = {
    "population_size": ("population_size", "populationSize", "lambda", "popsize"),
    "initial_step_size": ("initial_step_size", "initialStepSize", "sigma"),
    "seed": ("seed",),
    "max_iterations": ("max_iterations", "maxIterations", "maxiter"),
    "max_evaluations": ("max_evaluations", "maxEvaluations", "stopMaxFunEvals"),
    "function_tolerance": ("function_tolerance", "functionTolerance", "stopTolFun"),
    "max_time_fraction": (
        "max_time_fraction",
        "maxTimeFractionForDecomposition",
        "maxTimeFractionForEigendecomposition",
    ),
    "resume": ("resume",),
}
_KNOWN: Final = frozenset(alias for aliases in _ALIASES.values() for alias in aliases)


@dataclass(frozen=True, slots=True)
class AdvancedOptions:
    """Typed view of the advanced options. ``None`` means unset."""

    population_size: int | None = None
    initial_step_size: float | tuple[float, ...] | None = None
    seed: int | None = None
    max_iterations: int | None = None
    max_evaluations: int | None = None
    function_tolerance: float | None = None
    max_time_fraction: float | None = None
    resume: bool = False

    @classmethod
    def from_mapping(cls, options: Mapping[str, object] | None) -> AdvancedOptions:
        """Parse a loose mapping, checking each recognized value's type."""
        if not options:
            return cls()
        unknown = sorted(set(options) - _KNOWN)
        if unknown:
            _LOGGER.debug("Ignoring unknown options: %s", unknown)

        values: dict[str, object] = {}
        for field_name, aliases in _ALIASES.items():
            for alias in aliases:
                if alias in options and options[alias] is not None:
                    values[field_name] = (alias, options[alias])
                    break

        parsed: dict[str, object] = {}
        for field_name, (alias, value) in values.items():
            if field_name == "resume":
                parsed[field_name] = _as_bool(alias, value)
            elif field_name == "initial_step_size":
                parsed[field_name] = _as_step(alias, value)
            elif field_name in {"function_tolerance", "max_time_fraction"}:
                parsed[field_name] = _as_real(alias, value)
            else:
                parsed[field_name] = _as_int(alias, value)
        return cls(**parsed)  # type: ignore[arg-type]

    def as_dict(self) -> dict[str, object]:
        data = asdict(self)
        if isinstance(self.initial_step_size, tuple):
            data["initial_step_size"] = list(self.initial_step_size)
        return data


class OptionResolver:
    """Apply defaults and domain checks to produce engine parameters.

    Parameters
    ----------
    num_parameters : int
        Problem dimension ``n``.
    defaults : TerminationBudgets
        The driver's own budgets, used for every budget the options leave unset.
    """

    def __init__(self, num_parameters: int, defaults: TerminationBudgets | None = None) -> None:
        self._n = num_parameters
        self._defaults = defaults or TerminationBudgets()

    def default_population_size(self) -> int:
        return 4 + int(math.floor(3 * math.log(self._n)))

    def resolve(self, options: AdvancedOptions, initial_mean: np.ndarray) -> EngineParams:
        """Return engine parameters; raises :class:`InvalidOptionError` on bad values."""
        return EngineParams(
            dimension=self._n,
            initial_mean=np.array(initial_mean, dtype=np.float64),
            step_sizes=self._resolve_steps(options.initial_step_size),
            population_size=self._resolve_population(options.population_size),
            seed=self._resolve_seed(options.seed),
            budgets=self._resolve_budgets(options),
        )

    def _resolve_population(self, value: int | None) -> int:
        if value is None or value <= 0:
            return self.default_population_size()
        if value < 2:
            raise InvalidOptionError("population_size", value, "must be at least 2")
        return value

    def _resolve_steps(self, value: float | tuple[float, ...] | None) -> np.ndarray:
        if isinstance(value, tuple):
            if len(value) != self._n:
                raise InvalidOptionError(
                    "initial_step_size", list(value), f"expected {self._n} values"
                )
            steps = np.asarray(value, dtype=np.float64)
            if np.any(steps <= 0) or not np.all(np.isfinite(steps)):
                raise InvalidOptionError(
                    "initial_step_size", list(value), "per-dimension values must be positive"
                )
            return steps
        if value is None or value <= 0:
            value = DEFAULT_STEP_SIZE
        return np.full(self._n, float(value))

    def _resolve_seed(self, value: int | None) -> int | None:
        if value is None:
            return None
        if value < 0:
            raise InvalidOptionError("seed", value, "must be non-negative")
        return value

    def _resolve_budgets(self, options: AdvancedOptions) -> TerminationBudgets:
        resolved: dict[str, object] = {}
        for name in ("max_iterations", "max_evaluations", "function_tolerance", "max_time_fraction"):
            value = getattr(options, name)
            if value is None:
                resolved[name] = getattr(self._defaults, name)
                continue
            if value < 0:
                raise InvalidOptionError(name, value, "must be non-negative")
            resolved[name] = value
        return TerminationBudgets(**resolved)  # type: ignore[arg-type]


def _as_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise InvalidOptionError(name, value, "expected an integer")
    return int(value)


def _as_real(name: str, value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidOptionError(name, value, "expected a real number")
    result = float(value)
    if math.isnan(result):
        raise InvalidOptionError(name, value, "must not be NaN")
    return result


def _as_bool(name: str, value: object) -> bool:
    if not isinstance(value, bool):
        raise InvalidOptionError(name, value, "expected a boolean")
    return value


def _as_step(name: str, value: object) -> float | tuple[float, ...]:
    if isinstance(value, Sequence) and not isinstance(value, str):
        return tuple(_as_real(name, item) for item in value)
    if isinstance(value, np.ndarray):
        return tuple(_as_real(name, float(item)) for item in value.reshape(-1))
    return _as_real(name, value)


__all__ = ["AdvancedOptions", "OptionResolver", "DEFAULT_STEP_SIZE"]
