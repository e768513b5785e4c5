from __future__ import annotations

import heapq
import logging
import math
import time
from collections.abc import Hashable, Sequence
from dataclasses import dataclass, field

from .graph import NO_EDGE, Edge, WeightedDiGraph, WeightedGraph

logger = logging.getLogger(__name__)

METHODS = ("exact", "approx")


class ExactSolverLimitError(ValueError):
    '''Слишком много вершин для полного перебора'''


class SolverTimeoutError(TimeoutError):
    '''Полный перебор не уложился в time_limit'''


@dataclass(slots=True)
class SolverConfig:
    '''
    Параметры решателя

    Attributes:
        max_exact_vertices: предел числа вершин для полного перебора (None - без предела)
        time_limit: ограничение времени полного перебора в секундах (None - без ограничения)
    '''
    max_exact_vertices: int | None = 10
    time_limit: float | None = None


@dataclass(slots=True)
class SolveResult:
    '''
    Результат работы решателя

    Attributes:
        tour: найденный маршрут (None, если цикла нет)
        cost: вес замкнутого маршрута, None если маршрут не замыкается
        method: "exact" или "approx"
        complete: маршрут обходит все вершины и возвращается в начало
        elapsed: время решения в секундах
    '''
    tour: list[Hashable] | None
    cost: int | None
    method: str
    complete: bool
    elapsed: float


def next_permutation(elements: list) -> bool:
    '''
    Переставляет elements в следующую перестановку в лексикографическом порядке

    Returns:
        False, если elements уже последняя перестановка (список не меняется)
    '''
    i = len(elements) - 2
    while i >= 0 and elements[i] >= elements[i + 1]:
        i -= 1
    if i < 0:
        return False
    j = len(elements) - 1
    while elements[i] >= elements[j]:
        j -= 1
    elements[i], elements[j] = elements[j], elements[i]
    elements[i + 1:] = reversed(elements[i + 1:])
    return True


def path_weight(g: WeightedDiGraph, path: Sequence[Hashable] | None) -> int:
    '''Вес незамкнутого пути; -1 если путь короче двух вершин или какой-то дуги нет'''
    if path is None or len(path) < 2:
        return NO_EDGE
    total = 0
    for a, b in zip(path, path[1:], strict=False):
        w = g.weight(a, b)
        if w == NO_EDGE:
            return NO_EDGE
        total += w
    return total


def circuit_weight(g: WeightedDiGraph, tour: Sequence[Hashable] | None) -> int:
    '''Вес маршрута с возвратом в начальную вершину (замыкание добавляется, если его нет)'''
    if not tour:
        return NO_EDGE
    closed = list(tour) if len(tour) > 1 and tour[0] == tour[-1] else [*tour, tour[0]]
    return path_weight(g, closed)


def tour_cost(g: WeightedGraph, tour: Sequence[Hashable] | None) -> int | None:
    '''Вес замкнутого маршрута по рёбрам неориентированного графа; None, если какого-то ребра нет

    В отличие от circuit_weight, отсутствие ребра не путается с весом -1.
    '''
    if not tour:
        return None
    closed = list(tour) if len(tour) > 1 and tour[0] == tour[-1] else [*tour, tour[0]]
    cost = 0
    for a, b in zip(closed, closed[1:], strict=False):
        w = g.edge_weight(a, b)
        if w is None:
            return None
        cost += w
    return cost


@dataclass(slots=True)
class _Construction:
    '''Состояние жадного построения: степени вершин и принятые рёбра (одно на вызов)'''
    degree: dict[Hashable, int]
    links: dict[Hashable, list[Hashable]]
    accepted: int = 0
    endpoints: list[Hashable] = field(default_factory=list)

    @classmethod
    def for_vertices(cls, vertices: Sequence[Hashable]) -> _Construction:
        return cls(degree={v: 0 for v in vertices}, links={v: [] for v in vertices})

    def connected(self, u: Hashable, v: Hashable) -> bool:
        '''Достижима ли v из u по принятым рёбрам (обход в глубину)'''
        stack = [u]
        seen = {u}
        while stack:
            cur = stack.pop()
            if cur == v:
                return True
            for nxt in self.links[cur]:
                if nxt not in seen:
                    seen.add(nxt)
                    stack.append(nxt)
        return False

    def can_accept(self, e: Edge, n: int) -> bool:
        u, v = e.source, e.target
        if self.degree[u] >= 2 or self.degree[v] >= 2:
            return False
        # замыкать цикл можно только последним, n-м ребром
        return self.accepted + 1 == n or not self.connected(u, v)

    def accept(self, e: Edge) -> None:
        u, v = e.source, e.target
        self.degree[u] += 1
        self.degree[v] += 1
        self.links[u].append(v)
        self.links[v].append(u)
        self.endpoints += [u, v]
        self.accepted += 1

    def _fragment_start(self, v: Hashable) -> Hashable:
        if len(self.links[v]) < 2:
            return v
        prev, cur = v, self.links[v][0]
        while len(self.links[cur]) == 2:
            nxt = self.links[cur][0] if self.links[cur][0] != prev else self.links[cur][1]
            if nxt == v:
                return v  # цикл
            prev, cur = cur, nxt
        return cur

    def tour(self) -> list[Hashable]:
        '''Различные концы принятых рёбер, упорядоченные проходом по цепочкам

        Набор вершин тот же, что при простом удалении повторов из концов рёбер
        в порядке принятия, но порядок следует цепочкам, а не порядку принятия.
        '''
        tour: list[Hashable] = []
        visited: set[Hashable] = set()
        for v in dict.fromkeys(self.endpoints):
            if v in visited:
                continue
            cur: Hashable | None = self._fragment_start(v)
            while cur is not None:
                tour.append(cur)
                visited.add(cur)
                cur = next((x for x in self.links[cur] if x not in visited), None)
        return tour


class TSPSolver:
    '''
    Решение задачи коммивояжёра полным перебором и жадным приближением

    Attributes:
        config: параметры решателя (SolverConfig)
    '''

    def __init__(self, config: SolverConfig | None = None) -> None:
        self.config = config or SolverConfig()

    def shortest_circuit(self, g: WeightedGraph) -> list[Hashable] | None:
        '''
        Кратчайший гамильтонов цикл полным перебором перестановок вершин

        Перестановки перебираются в лексикографическом порядке, начиная с
        отсортированной; при равной стоимости побеждает первая найденная.

        Returns:
            вершины в порядке обхода, первая повторена в конце;
            None, если вершин нет или цикла не существует
        '''
        vertices = sorted(g.vertices())
        n = len(vertices)
        if n == 0:
            return None
        limit = self.config.max_exact_vertices
        if limit is not None and n > limit:
            raise ExactSolverLimitError(f"полный перебор для {n} вершин запрещён (предел {limit})")
        deadline = None
        if self.config.time_limit is not None:
            deadline = time.monotonic() + self.config.time_limit

        best_tour = None
        best_cost = math.inf
        checked = 0
        while True:
            cost = self._tour_cost(g, vertices)
            checked += 1
            if cost < best_cost:
                best_cost = cost
                best_tour = [*vertices, vertices[0]]
                logger.debug("Перестановка %d: новый лучший %s, стоимость=%s", checked, best_tour, cost)
            if not next_permutation(vertices):
                break
            if deadline is not None and time.monotonic() >= deadline:
                raise SolverTimeoutError(f"перебор прерван после {checked} перестановок")

        logger.info("Перебрано %d перестановок, лучшая стоимость %s", checked, best_cost)
        return best_tour

    @staticmethod
    def _tour_cost(g: WeightedGraph, tour: Sequence[Hashable]) -> float:
        '''Стоимость замкнутого маршрута; math.inf, если какого-то ребра нет'''
        cost = tour_cost(g, tour)
        return math.inf if cost is None else cost

    def approx_shortest_circuit(self, g: WeightedGraph) -> list[Hashable]:
        '''
        Приближённый цикл жадным выбором рёбер

        Рёбра берутся по возрастанию веса (при равенстве - в порядке g.edges()).
        Ребро принимается, если степени обоих концов меньше 2 и оно не
        замыкает цикл раньше, чем будет принято n-е ребро.

        Returns:
            вершины маршрута без повторения начальной; если граф слишком
            разреженный, вершин может оказаться меньше, чем в графе
        '''
        vertices = g.vertices()
        n = len(vertices)
        state = _Construction.for_vertices(vertices)
        heap = [(e.weight, seq, e) for seq, e in enumerate(g.edges()) if e.source != e.target]
        heapq.heapify(heap)

        while heap and state.accepted < n:
            _, _, e = heapq.heappop(heap)
            if state.can_accept(e, n):
                state.accept(e)
                logger.debug("Принято ребро %s-%s (%d), всего %d", e.source, e.target, e.weight, state.accepted)
            else:
                logger.debug("Отклонено ребро %s-%s (%d)", e.source, e.target, e.weight)

        tour = state.tour()
        if len(tour) != n or state.accepted < n - 1:
            logger.info("Жадное построение остановилось: %d рёбер из %d", state.accepted, n)
        return tour

    def path_weight(self, g: WeightedDiGraph, path: Sequence[Hashable] | None) -> int:
        return path_weight(g, path)

    def solve(self, g: WeightedGraph, method: str = "exact") -> SolveResult:
        '''Запуск одного из методов с оценкой найденного маршрута'''
        if method not in METHODS:
            raise ValueError(f"неизвестный метод {method!r}, ожидается один из {METHODS}")
        started = time.perf_counter()
        if method == "exact":
            tour = self.shortest_circuit(g)
        else:
            tour = self.approx_shortest_circuit(g)
        elapsed = time.perf_counter() - started

        cost = tour_cost(g, tour)
        complete = cost is not None and len(set(tour)) == g.n
        logger.info("%s: стоимость=%s, полный=%s, %.3f с", method, cost, complete, elapsed)
        return SolveResult(tour=tour, cost=cost, method=method, complete=complete, elapsed=elapsed)
