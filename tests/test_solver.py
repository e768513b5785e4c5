"""
Tests for the exact and greedy TSP solvers and the path utilities.
"""

import itertools
import math

import pytest

from tsp_circuit.graph import GraphFactory, WeightedDiGraph, WeightedGraph
from tsp_circuit.solver import (
    ExactSolverLimitError,
    SolverConfig,
    SolverTimeoutError,
    TSPSolver,
    circuit_weight,
    next_permutation,
    path_weight,
    tour_cost,
)

TRIANGLE = [("A", "B", 1), ("B", "C", 1), ("A", "C", 5)]


@pytest.fixture
def solver():
    return TSPSolver()


def brute_force_cost(g):
    '''Reference optimum via itertools, independent of next_permutation'''
    first, *rest = sorted(g.vertices())
    best = math.inf
    for perm in itertools.permutations(rest):
        cost = circuit_weight(g, [first, *perm])
        if cost != -1:
            best = min(best, cost)
    return best


class TestNextPermutation:
    @pytest.mark.parametrize("k", [1, 2, 3, 4, 5])
    def test_yields_k_factorial_increasing_arrangements(self, k):
        items = list(range(k))
        seen = [tuple(items)]
        while next_permutation(items):
            assert tuple(items) > seen[-1]
            seen.append(tuple(items))
        assert len(seen) == math.factorial(k)
        assert len(set(seen)) == len(seen)

    def test_successor(self):
        items = [1, 3, 2]
        assert next_permutation(items)
        assert items == [2, 1, 3]

    def test_last_permutation_is_left_unchanged(self):
        items = ["C", "B", "A"]
        assert not next_permutation(items)
        assert items == ["C", "B", "A"]

    def test_empty(self):
        items = []
        assert not next_permutation(items)

    def test_repeated_elements(self):
        items = [1, 1, 2]
        seen = [tuple(items)]
        while next_permutation(items):
            seen.append(tuple(items))
        assert seen == [(1, 1, 2), (1, 2, 1), (2, 1, 1)]


class TestPathWeight:
    def test_sums_consecutive_arcs(self):
        g = WeightedGraph(TRIANGLE)
        assert path_weight(g, ["A", "B", "C"]) == 2
        assert path_weight(g, ["A", "B", "C", "A"]) == 7

    @pytest.mark.parametrize("path", [None, [], ["A"]])
    def test_short_or_missing_path(self, path):
        assert path_weight(WeightedGraph(TRIANGLE), path) == -1

    def test_missing_edge_short_circuits(self):
        g = WeightedGraph([("A", "B", 4), ("B", "C", 6)])
        assert path_weight(g, ["A", "B", "C", "D"]) == -1
        assert path_weight(g, ["A", "C", "B"]) == -1

    def test_directed_graph(self):
        g = WeightedDiGraph([("A", "B", 2), ("B", "C", 3)])
        assert path_weight(g, ["A", "B", "C"]) == 5
        assert path_weight(g, ["C", "B", "A"]) == -1

    def test_solver_method_delegates(self, solver):
        assert solver.path_weight(WeightedGraph(TRIANGLE), ["C", "B"]) == 1

    def test_circuit_weight_closes_open_tour(self):
        g = WeightedGraph(TRIANGLE)
        assert circuit_weight(g, ["A", "B", "C"]) == 7
        assert circuit_weight(g, ["A", "B", "C", "A"]) == 7
        assert circuit_weight(g, []) == -1
        assert circuit_weight(g, None) == -1

    def test_tour_cost_keeps_negative_weights(self):
        g = WeightedGraph([("A", "B", -1), ("B", "C", 1), ("A", "C", 1)])
        assert tour_cost(g, ["A", "B", "C"]) == 1
        assert tour_cost(g, ["A", "B", "C", "A"]) == 1
        assert circuit_weight(g, ["A", "B", "C"]) == -1

    def test_tour_cost_missing_edge(self):
        g = WeightedGraph([("A", "B", 4), ("B", "C", 6)])
        assert tour_cost(g, ["A", "B", "C"]) is None
        assert tour_cost(g, []) is None
        assert tour_cost(g, None) is None


class TestShortestCircuit:
    def test_triangle(self, solver):
        g = WeightedGraph(TRIANGLE)
        tour = solver.shortest_circuit(g)
        assert tour == ["A", "B", "C", "A"]
        assert path_weight(g, tour) == 7

    def test_complete_graph_tour_shape(self, solver):
        g = WeightedGraph(GraphFactory.random_complete(6, seed=5))
        tour = solver.shortest_circuit(g)
        assert len(tour) == g.n + 1
        assert tour[0] == tour[-1]
        assert sorted(tour[:-1]) == sorted(g.vertices())

    @pytest.mark.parametrize("seed", [0, 1, 2, 3])
    def test_matches_reference_optimum(self, solver, seed):
        g = WeightedGraph(GraphFactory.random_complete(6, seed=seed))
        assert path_weight(g, solver.shortest_circuit(g)) == brute_force_cost(g)

    def test_first_minimum_wins_ties(self, solver):
        # every tour over equal weights costs the same
        g = WeightedGraph([(a, b, 1) for a, b in itertools.combinations("ABCD", 2)])
        assert solver.shortest_circuit(g) == ["A", "B", "C", "D", "A"]

    def test_no_hamiltonian_cycle(self, solver):
        # star: every edge goes through hub H, no rim
        g = WeightedGraph([("H", "A", 1), ("H", "B", 1), ("H", "C", 1)])
        assert solver.shortest_circuit(g) is None

    def test_path_graph_has_no_circuit(self, solver):
        g = WeightedGraph([("A", "B", 1), ("B", "C", 1), ("C", "D", 1)])
        assert solver.shortest_circuit(g) is None

    def test_empty_graph(self, solver):
        assert solver.shortest_circuit(WeightedGraph([])) is None

    def test_two_vertices_uses_edge_twice(self, solver):
        g = WeightedGraph([("A", "B", 4)])
        tour = solver.shortest_circuit(g)
        assert tour == ["A", "B", "A"]
        assert path_weight(g, tour) == 8

    def test_integer_labels(self, solver):
        g = WeightedGraph([(3, 1, 2), (1, 2, 2), (2, 3, 2)])
        assert solver.shortest_circuit(g) == [1, 2, 3, 1]

    def test_vertex_ceiling(self):
        g = WeightedGraph(GraphFactory.random_complete(5, seed=1))
        with pytest.raises(ExactSolverLimitError):
            TSPSolver(SolverConfig(max_exact_vertices=4)).shortest_circuit(g)
        assert TSPSolver(SolverConfig(max_exact_vertices=None)).shortest_circuit(g) is not None

    def test_time_limit(self):
        g = WeightedGraph(GraphFactory.random_complete(9, seed=1))
        with pytest.raises(SolverTimeoutError):
            TSPSolver(SolverConfig(time_limit=0.0)).shortest_circuit(g)


class TestApproxShortestCircuit:
    def test_triangle_matches_optimum(self, solver):
        g = WeightedGraph(TRIANGLE)
        tour = solver.approx_shortest_circuit(g)
        assert tour == ["A", "B", "C"]
        assert circuit_weight(g, tour) == 7

    def test_complete_graph_gives_full_circuit(self, solver):
        g = WeightedGraph(GraphFactory.random_complete(8, seed=4))
        tour = solver.approx_shortest_circuit(g)
        assert sorted(tour) == sorted(g.vertices())
        assert circuit_weight(g, tour) > 0

    @pytest.mark.parametrize("seed", range(6))
    def test_never_beats_exact(self, solver, seed):
        g = WeightedGraph(GraphFactory.random_complete(7, seed=seed))
        approx = circuit_weight(g, solver.approx_shortest_circuit(g))
        exact = path_weight(g, solver.shortest_circuit(g))
        assert approx >= exact

    def test_tour_follows_accepted_edges(self, solver):
        # greedy accepts C-D, A-B, B-C, then the closing A-D
        g = WeightedGraph([
            ("C", "D", 1), ("A", "B", 2), ("B", "C", 3),
            ("A", "C", 10), ("B", "D", 10), ("A", "D", 4),
        ])
        tour = solver.approx_shortest_circuit(g)
        assert tour == ["C", "D", "A", "B"]
        assert circuit_weight(g, tour) == 10

    def test_premature_cycle_is_rejected(self, solver):
        # cheap triangle A-B-C must not close before D joins,
        # so the greedy pass is forced onto the expensive B-D
        g = WeightedGraph([
            ("A", "B", 1), ("B", "C", 1), ("A", "C", 1),
            ("C", "D", 5), ("A", "D", 5), ("B", "D", 50),
        ])
        tour = solver.approx_shortest_circuit(g)
        assert tour == ["A", "B", "D", "C"]
        assert circuit_weight(g, tour) == 57
        assert path_weight(g, solver.shortest_circuit(g)) == 12

    def test_ties_are_deterministic(self, solver):
        edges = [(a, b, 1) for a, b in itertools.combinations("ABCDE", 2)]
        first = solver.approx_shortest_circuit(WeightedGraph(edges))
        assert first == solver.approx_shortest_circuit(WeightedGraph(list(reversed(edges))))

    def test_star_graph_is_incomplete(self, solver):
        g = WeightedGraph([("H", "A", 1), ("H", "B", 2), ("H", "C", 3)])
        tour = solver.approx_shortest_circuit(g)
        assert tour == ["A", "H", "B"]
        assert len(tour) < g.n

    def test_disjoint_fragments_are_chained_separately(self, solver):
        g = WeightedGraph([("A", "B", 1), ("C", "D", 2)])
        tour = solver.approx_shortest_circuit(g)
        assert tour == ["A", "B", "C", "D"]
        assert circuit_weight(g, tour) == -1

    def test_two_vertices(self, solver):
        assert solver.approx_shortest_circuit(WeightedGraph([("A", "B", 3)])) == ["A", "B"]

    def test_self_loops_are_ignored(self, solver):
        g = WeightedGraph([("A", "A", 0), ("A", "B", 1), ("B", "C", 1), ("A", "C", 1)])
        assert sorted(solver.approx_shortest_circuit(g)) == ["A", "B", "C"]

    def test_empty_graph(self, solver):
        assert solver.approx_shortest_circuit(WeightedGraph([])) == []


class TestSolve:
    def test_exact_result(self, solver):
        res = solver.solve(WeightedGraph(TRIANGLE), "exact")
        assert res.method == "exact"
        assert res.complete
        assert res.cost == 7
        assert res.elapsed >= 0

    def test_approx_result(self, solver):
        res = solver.solve(WeightedGraph(TRIANGLE), "approx")
        assert res.complete
        assert res.cost == 7

    def test_no_circuit(self, solver):
        res = solver.solve(WeightedGraph([("H", "A", 1), ("H", "B", 1), ("H", "C", 1)]), "exact")
        assert res.tour is None
        assert not res.complete
        assert res.cost is None

    def test_fragments_covering_all_vertices_are_not_complete(self, solver):
        res = solver.solve(WeightedGraph([("A", "B", 1), ("C", "D", 2)]), "approx")
        assert len(res.tour) == 4
        assert not res.complete

    def test_negative_weight_edge_is_scored(self, solver):
        g = WeightedGraph([("A", "B", -1), ("B", "C", 1), ("A", "C", 1)])
        for method in ("exact", "approx"):
            res = solver.solve(g, method)
            assert res.complete
            assert res.cost == 1

    def test_unknown_method(self, solver):
        with pytest.raises(ValueError):
            solver.solve(WeightedGraph(TRIANGLE), "genetic")
