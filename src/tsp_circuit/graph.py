
from __future__ import annotations

import csv
import logging
import random
from collections.abc import Hashable, Iterable
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

NO_EDGE = -1


@dataclass(slots=True, frozen=True)
class Edge:
    '''
    Взвешенное ребро (дуга) графа

    Сравнения "<", "<=", ">", ">=" выполняются только по весу: так ребро можно
    использовать как ключ приоритета. Равенство сравнивает все три поля.

    Attributes:
        source: начальная вершина
        target: конечная вершина
        weight: вес ребра (по соглашению >= 0, не проверяется)
    '''
    source: Hashable
    target: Hashable
    weight: int

    def __lt__(self, other: Edge) -> bool:
        return self.weight < other.weight

    def __gt__(self, other: Edge) -> bool:
        return self.weight > other.weight

    def __le__(self, other: Edge) -> bool:
        return self.weight <= other.weight

    def __ge__(self, other: Edge) -> bool:
        return self.weight >= other.weight

    @staticmethod
    def from_row(row: list[str]) -> Edge:
        '''Разбирает строку вида [source, target, weight]'''
        if len(row) != 3:
            raise ValueError(f"ожидалось 3 поля (source,target,weight), получено {len(row)}")
        source, target, weight = (x.strip() for x in row)
        if not source or not target:
            raise ValueError("пустое имя вершины")
        return Edge(source, target, int(weight))

    def as_row(self) -> list[str]:
        return [str(self.source), str(self.target), str(self.weight)]


def _as_edge(item: Edge | tuple) -> Edge:
    return item if isinstance(item, Edge) else Edge(*item)


class WeightedDiGraph:
    '''
    Взвешенный ориентированный граф на списках смежности

    Хранит отображение `adj[u][v] = w` (дуга u->v с весом w).
    Вершина становится ключом только при добавлении исходящей дуги:
    вершина, в которую дуги только входят, не имеет собственной записи.
    После построения граф не изменяется.
    '''

    def __init__(self, edges: Iterable[Edge | tuple] = ()) -> None:
        self.adj: dict[Hashable, dict[Hashable, int]] = {}
        for e in map(_as_edge, edges):
            self.add_edge(e.source, e.target, e.weight)

    def add_edge(self, u: Hashable, v: Hashable, w: int) -> None:
        '''Добавляет (или перезаписывает) дугу u->v с весом w'''
        self.adj.setdefault(u, {})[v] = w

    # ---- Запросы ------------------------------------------------------------
    def is_adjacent(self, u: Hashable, v: Hashable) -> bool:
        return u in self.adj and v in self.adj[u]

    def weight(self, u: Hashable, v: Hashable) -> int:
        '''Вес дуги u->v или NO_EDGE (-1), если дуги нет'''
        if not self.is_adjacent(u, v):
            return NO_EDGE
        return self.adj[u][v]

    def neighbors(self, u: Hashable) -> set[Hashable]:
        return set(self.adj.get(u, ()))


class WeightedGraph(WeightedDiGraph):
    '''
    Взвешенный неориентированный граф

    Каждое ребро (u, v, w) вставляется как две дуги u->v и v->u.
    Собственное отображение `links` учитывает обе концевые вершины и является
    источником списка вершин: изолированную вершину без рёбер задать нельзя.
    '''

    def __init__(self, edges: Iterable[Edge | tuple] = ()) -> None:
        self.links: dict[Hashable, dict[Hashable, int]] = {}
        super().__init__(edges)

    def add_edge(self, u: Hashable, v: Hashable, w: int) -> None:
        super().add_edge(u, v, w)
        super().add_edge(v, u, w)
        self.links.setdefault(u, {})[v] = w
        self.links.setdefault(v, {})[u] = w

    @property
    def n(self) -> int:
        return len(self.links)

    def vertices(self) -> list[Hashable]:
        '''Все вершины в порядке первого появления'''
        return list(self.links)

    def edge_weight(self, u: Hashable, v: Hashable) -> int | None:
        '''Вес ребра или None, если ребра нет'''
        return self.links.get(u, {}).get(v)

    def edges(self) -> list[Edge]:
        '''Каждое ребро ровно один раз, как Edge(u, v, w) с u <= v'''
        return [Edge(u, v, w)
                for u in sorted(self.links)
                for v, w in sorted(self.links[u].items())
                if u <= v]

    def is_complete(self) -> bool:
        n = self.n
        return all(len(set(nbrs) - {u}) == n - 1 for u, nbrs in self.links.items())

    # ---- Загрузка / сохранение --------------------------------------------
    @staticmethod
    def from_csv(path: str | Path) -> WeightedGraph:
        '''Загружает неориентированный граф из списка рёбер source,target,weight'''
        return WeightedGraph(read_edges(path))

    def to_csv(self, path: str | Path) -> int:
        '''Сохраняет граф как список рёбер (каждое ребро один раз)'''
        return write_edges(self.edges(), path)


def read_edges(path: str | Path) -> list[Edge]:
    '''Читает список рёбер из файла: одна строка "source,target,weight", без заголовка

    Пустые строки пропускаются. Некорректная строка -> ValueError с номером строки.
    '''
    edges: list[Edge] = []
    with open(path, encoding="utf-8", newline="") as f:
        for lineno, row in enumerate(csv.reader(f), start=1):
            if not row or not "".join(row).strip():
                continue
            try:
                edges.append(Edge.from_row(row))
            except ValueError as e:
                raise ValueError(f"{path}:{lineno}: некорректная строка {','.join(row)!r}: {e}") from e
    logger.debug("Прочитано %d рёбер из %s", len(edges), path)
    return edges


def write_edges(edges: Iterable[Edge | tuple], path: str | Path) -> int:
    '''Записывает рёбра в том же формате; возвращает число строк'''
    count = 0
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, lineterminator="\n")
        for e in map(_as_edge, edges):
            writer.writerow(e.as_row())
            count += 1
    logger.debug("Записано %d рёбер в %s", count, path)
    return count


class GraphFactory:
    '''Генерация случайных списков рёбер с вершинами Vert1..VertN'''

    @staticmethod
    def labels(n: int) -> list[str]:
        return [f"Vert{i}" for i in range(1, n + 1)]

    @staticmethod
    def random_complete(n: int, *, low: int = 1, high: int = 500, seed: int | None = None) -> list[Edge]:
        '''Полный граф из n вершин: C(n,2) рёбер с весами из [low, high]'''
        if n < 1:
            raise ValueError("n >= 1")
        if low > high:
            raise ValueError("low <= high")
        rng = random.Random(seed)
        names = GraphFactory.labels(n)
        return [Edge(names[i], names[j], rng.randint(low, high))
                for i in range(n)
                for j in range(i + 1, n)]

    @staticmethod
    def random_sparse(n: int, m: int, *, low: int = 1, high: int = 500, seed: int | None = None) -> list[Edge]:
        '''Разреженный граф: n вершин, m различных неориентированных рёбер (без петель)

        Вершины без рёбер в список не попадают. Такой граф может не иметь
        гамильтонова цикла; метод полезен для экспериментов.
        '''
        if n < 2:
            raise ValueError("n >= 2")
        max_m = n * (n - 1) // 2
        if not 0 <= m <= max_m:
            raise ValueError(f"число рёбер вне диапазона: 0 <= m <= {max_m}")
        rng = random.Random(seed)
        names = GraphFactory.labels(n)
        pairs = rng.sample([(i, j) for i in range(n) for j in range(i + 1, n)], m)
        return [Edge(names[i], names[j], rng.randint(low, high)) for i, j in sorted(pairs)]
