
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .graph import GraphFactory, WeightedGraph, read_edges, write_edges
from .solver import SolveResult, SolverConfig, TSPSolver


def build_argparser() -> argparse.ArgumentParser:
    '''Создаёт парсер аргументов командной строки'''
    p = argparse.ArgumentParser(
        prog="tsp-circuit",
        description="Задача коммивояжёра: полный перебор и жадное приближение по списку рёбер.",
    )
    src = p.add_argument_group("Источник графа")
    src.add_argument("--csv", type=str, default=None, help="Путь к списку рёбер source,target,weight")

    rnd = p.add_argument_group("Случайный граф")
    rnd.add_argument("--random", action="store_true", help="Сгенерировать случайный граф вместо CSV")
    rnd.add_argument("--n", type=int, default=6, help="Количество вершин (для --random)")
    rnd.add_argument("--sparse", action="store_true", help="Создать разреженный граф (по умолчанию полный)")
    rnd.add_argument("--edges", type=int, default=None, help="Количество рёбер для --sparse")
    rnd.add_argument("--low", type=int, default=1, help="Минимальный вес")
    rnd.add_argument("--high", type=int, default=500, help="Максимальный вес")
    rnd.add_argument("--seed", type=int, default=None, help="Seed для воспроизводимости")

    slv = p.add_argument_group("Решатель")
    slv.add_argument("--method", choices=("exact", "approx", "both"), default="both", help="Метод решения")
    slv.add_argument("--max-exact", type=int, default=10, help="Предел числа вершин для полного перебора")
    slv.add_argument("--time-limit", type=float, default=None, help="Ограничение времени перебора, секунды")

    out = p.add_argument_group("Вывод")
    out.add_argument("--save-graph", type=str, default=None, help="Сохраняет список рёбер графа в файл")
    out.add_argument("--save-best", type=str, default=None, help="Сохраняет лучший тур в файл (txt)")
    out.add_argument("-v", "--verbose", action="store_true", help="Отладочный вывод")

    return p


def _print_result(res: SolveResult) -> None:
    title = "Точный" if res.method == "exact" else "Приближённый"
    if not res.tour:
        print(f"{title}: гамильтонов цикл не найден")
        return
    if res.complete:
        route = res.tour if res.tour[0] == res.tour[-1] else [*res.tour, res.tour[0]]
        print(f"{title} маршрут:", " -> ".join(map(str, route)))
        print("Стоимость:", res.cost)
    else:
        print(f"{title}: неполный маршрут, вершин {len(res.tour)}:", " -> ".join(map(str, res.tour)))
    print(f"Время: {res.elapsed:.3f} с")


def main(argv: list[str] | None = None) -> int:
    '''Точка входа для tsp-circuit'''
    parser = build_argparser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    # Построение графа
    try:
        if args.csv and not args.random:
            edges = read_edges(args.csv)
        elif args.sparse:
            if args.edges is None:
                parser.error("--edges обязательно для --sparse")
            edges = GraphFactory.random_sparse(args.n, args.edges, low=args.low, high=args.high, seed=args.seed)
        else:
            edges = GraphFactory.random_complete(args.n, low=args.low, high=args.high, seed=args.seed)
    except (OSError, ValueError) as e:
        print(f"Ошибка чтения графа: {e}", file=sys.stderr)
        return 1

    if args.save_graph:
        try:
            count = write_edges(edges, args.save_graph)
        except OSError as e:
            print(f"Ошибка записи графа: {e}", file=sys.stderr)
            return 1
        print(count)

    g = WeightedGraph(edges)
    print(f"Вершин: {g.n}, рёбер: {len(g.edges())}")

    solver = TSPSolver(SolverConfig(max_exact_vertices=args.max_exact, time_limit=args.time_limit))
    methods = ("exact", "approx") if args.method == "both" else (args.method,)
    results: list[SolveResult] = []
    failed = False
    for method in methods:
        try:
            res = solver.solve(g, method)
        except (ValueError, TimeoutError) as e:
            print(f"Ошибка решателя ({method}): {e}", file=sys.stderr)
            failed = True
            continue
        _print_result(res)
        results.append(res)

    if len(results) == 2 and all(r.complete for r in results):
        exact, approx = results
        gap = (approx.cost - exact.cost) / exact.cost * 100 if exact.cost else 0.0
        print(f"Отклонение приближения: {gap:.2f}%")

    best = min((r for r in results if r.complete), key=lambda r: r.cost, default=None)
    if args.save_best and best is not None:
        Path(args.save_best).write_text(" ".join(map(str, best.tour)), encoding="utf-8")
        print("Сохранено:", args.save_best)

    return 1 if failed else 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
