"""Задача коммивояжёра на взвешенном графе: точный перебор и жадное приближение.

Пакет предоставляет:
- tsp_circuit.graph: классы Edge, WeightedDiGraph, WeightedGraph, чтение/запись списка рёбер, GraphFactory
- tsp_circuit.solver: TSPSolver, SolverConfig, SolveResult, next_permutation, path_weight
- tsp_circuit.cli: CLI для запуска из терминала
"""
from .graph import Edge, GraphFactory, WeightedDiGraph, WeightedGraph, read_edges, write_edges
from .solver import (
    ExactSolverLimitError,
    SolveResult,
    SolverConfig,
    SolverTimeoutError,
    TSPSolver,
    circuit_weight,
    next_permutation,
    path_weight,
    tour_cost,
)

__all__ = [
    "Edge",
    "WeightedDiGraph",
    "WeightedGraph",
    "GraphFactory",
    "read_edges",
    "write_edges",
    "TSPSolver",
    "SolverConfig",
    "SolveResult",
    "ExactSolverLimitError",
    "SolverTimeoutError",
    "next_permutation",
    "path_weight",
    "circuit_weight",
    "tour_cost",
]
