"""Benchmark objective systems."""

from .benchmarks import (
    Ackley,
    BenchmarkSystem,
    Cigtab,
    DropWave,
    Easom,
    Rosenbrock,
    Schwefel,
    Sphere,
    available_systems,
    system_from_name,
)

__all__ = [
    "BenchmarkSystem",
    "Sphere",
    "Cigtab",
    "Ackley",
    "DropWave",
    "Rosenbrock",
    "Schwefel",
    "Easom",
    "available_systems",
    "system_from_name",
]
