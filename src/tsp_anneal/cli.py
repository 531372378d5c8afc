#!/usr/bin/env python3
"""Simulated annealing TSP solver CLI.

Loads (or generates) a weighted graph, runs the annealing schedule
`--number-of-tests` times and writes per-run artifacts next to the input:

  <input>_<run>.out.csv    duration_ns, cost, [path]
  <input>_<run>.plot.csv   elapsed_ns, cost for every accepted state
  <input>.out.mem          memory samples taken while running
  <input>.summary.csv      cost / runtime statistics over all runs

CLI examples:
    tsp-anneal -i gr17.txt
    tsp-anneal -t edge_list -i graph.csv -n 3 --seed 7
    tsp-anneal -t random --vertices 50 --additional-edges 200 --save-graph random50.csv
"""
from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
from tqdm import tqdm

from . import config
from .analysis import load_results, plot_trace, summarize
from .annealing import AnnealingConfig, anneal
from .artifacts import format_tour, run_paths, write_result, write_trace
from .graph import Graph
from .runner import measure_execution_time


@dataclass
class RunRecord:
    run: int
    duration_ns: int
    cost: int
    tour: List[int]
    result_path: str
    trace_path: str
    peak_rss_kb: int = 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Approximate TSP tours with simulated annealing")
    ap.add_argument('-t', '--type-of-input', choices=config.INPUT_TYPES, default='full_table',
                    help='full_table: whitespace matrix, edge_list: "v1, v2, w" lines, random: generate a graph')
    ap.add_argument('-i', '--input', help=f'Input graph file, also the artifact prefix (default: {config.DEFAULT_INPUT})')
    ap.add_argument('-n', '--number-of-tests', type=int, default=config.NUMBER_OF_TESTS, help='Independent runs')
    ap.add_argument('--temperature', type=float, default=config.TEMPERATURE)
    ap.add_argument('--era-len', type=int, default=config.ERA_LEN, help='Iterations per temperature step')
    ap.add_argument('--coolant', type=float, default=config.COOLANT, help='Cooling multiplier in (0, 1)')
    ap.add_argument('--temperature-floor', type=float, default=config.TEMPERATURE_FLOOR)
    ap.add_argument('--seed', type=int, default=config.SEED, help='Base seed for the random graph and every run')
    ap.add_argument('--time-limit', type=float, default=config.TIME_LIMIT, help='Wall-clock seconds per run')
    ap.add_argument('--track-best', action='store_true', help='Also report the best tour seen during a run')
    ap.add_argument('--cycle-initial-cost', action='store_true',
                    help='Start from the cycle cost of the identity tour instead of its open path cost')
    ap.add_argument('--vertices', type=int, default=config.RANDOM_VERTICES, help='random: number of vertices')
    ap.add_argument('--weight-min', type=int, default=config.RANDOM_WEIGHT_RANGE[0], help='random: lowest weight')
    ap.add_argument('--weight-max', type=int, default=config.RANDOM_WEIGHT_RANGE[1],
                    help='random: weights are drawn below this value')
    ap.add_argument('--additional-edges', type=int, default=config.RANDOM_ADDITIONAL_EDGES,
                    help='random: edges added on top of the spanning tree')
    ap.add_argument('--save-graph', help='Write the loaded/generated graph in edge-list format')
    ap.add_argument('--print-graph', action='store_true', help='Print the weight matrix before solving')
    ap.add_argument('--no-progress', action='store_true', help='Disable the progress bar')
    ap.add_argument('--plot', help='Write a PNG of the last run trace')
    return ap


def spawn_seeds(seed: Optional[int], runs: int) -> Tuple[np.random.SeedSequence, List[np.random.SeedSequence]]:
    """Independent streams: one for graph generation, one per run."""
    graph_seed, *run_seeds = np.random.SeedSequence(seed).spawn(runs + 1)
    return graph_seed, run_seeds


def load_graph(args, seed: Optional[np.random.SeedSequence] = None) -> Graph:
    if args.type_of_input == 'random':
        rng = np.random.default_rng(seed)
        return Graph.generate_random_complete_graph(
            args.vertices, (args.weight_min, args.weight_max), args.additional_edges, rng=rng)
    if args.type_of_input == 'edge_list':
        return Graph.read_graph_from_file(args.input)
    return Graph.read_graph_from_file_full_table(args.input)


def run_tests(graph: Graph, cfg: AnnealingConfig, args,
              seeds: List[np.random.SeedSequence]) -> List[RunRecord]:
    n = graph.number_of_vertex
    expected_eras = cfg.expected_eras()
    records: List[RunRecord] = []
    for i in range(args.number_of_tests):
        rng = np.random.default_rng(seeds[i])
        bar = tqdm(total=expected_eras, desc=f"Run {i + 1}/{args.number_of_tests}: calculating best route",
                   unit='era', disable=args.no_progress, leave=False)

        def progress(era: int, temperature: float, cost: int) -> None:
            bar.update(1)
            bar.set_postfix(T=f"{temperature:.3g}", cost=cost)

        try:
            measurement = measure_execution_time(
                lambda: anneal(graph, n, cfg, rng=rng, progress=progress),
                mem_path=f"{args.input}.out.mem",
                time_limit=args.time_limit,
            )
        finally:
            bar.close()
        result = measurement.value
        print(f"\nTime of execution: {measurement.elapsed_ns} ns")
        print(f"Minimum cost is {result.cost} on path {format_tour(result.tour)}")
        if cfg.track_best:
            print(f"Best cost seen is {result.best_cost} on path {format_tour(result.best_tour)}")

        result_path, trace_path = run_paths(args.input, i)
        write_result(result_path, measurement.elapsed_ns, result.cost, result.tour)
        write_trace(trace_path, result.trace)
        records.append(RunRecord(
            run=i,
            duration_ns=measurement.elapsed_ns,
            cost=result.cost,
            tour=result.tour,
            result_path=result_path,
            trace_path=trace_path,
            peak_rss_kb=measurement.peak_rss_kb,
        ))
    return records


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.input is None:
        if args.type_of_input == 'random':
            args.input = f"random{args.vertices}.csv"
        else:
            args.input = config.DEFAULT_INPUT

    cfg = AnnealingConfig(
        temperature=args.temperature,
        era_len=args.era_len,
        temperature_floor=args.temperature_floor,
        coolant=args.coolant,
        track_best=args.track_best,
        cycle_initial_cost=args.cycle_initial_cost,
    )
    graph_seed, run_seeds = spawn_seeds(args.seed, max(args.number_of_tests, 0))
    try:
        graph = load_graph(args, graph_seed)
        cfg.validate(graph.number_of_vertex)
        if args.save_graph:
            graph.save_to_file(args.save_graph)
            print(f"✓ Graph saved to {args.save_graph}")
    except (OSError, ValueError) as e:
        print(f"[fatal] {e}")
        return 1
    if args.time_limit <= 0:
        print(f"[fatal] time limit must be positive, got {args.time_limit}")
        return 1

    graph.set_zero_to_max()
    if args.print_graph:
        print(graph.format_matrix())

    records = run_tests(graph, cfg, args, run_seeds)
    if not records:
        print("[info] no runs requested")
        return 0

    summary = summarize(load_results([r.result_path for r in records]))
    summary_path = f"{args.input}.summary.csv"
    summary.to_csv(summary_path, index=False)
    print(f"\n✓ Summary over {len(records)} runs saved to {summary_path}")
    print(summary.to_string(index=False))

    if args.plot:
        plot_trace(records[-1].trace_path, args.plot)
        print(f"✓ Trace plot saved to {args.plot}")
    return 0


if __name__ == '__main__':  # pragma: no cover
    sys.exit(main())
