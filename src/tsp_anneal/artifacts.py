"""Per-run output files.

- trace file: one ``elapsed_ns, cost`` line per accepted state
- result file: a single ``duration_ns, cost, [v1 - v2 - ...]`` line
"""
from __future__ import annotations

import os
from typing import List, Sequence, Tuple

import pandas as pd

TRACE_COLUMNS = ['elapsed_ns', 'cost']


def run_paths(input_path: str, run: int) -> Tuple[str, str]:
    """(result_path, trace_path) for run number `run` of `input_path`."""
    return f"{input_path}_{run}.out.csv", f"{input_path}_{run}.plot.csv"


def format_tour(tour: Sequence[int]) -> str:
    return '[' + ' - '.join(str(v) for v in tour) + ']'


def parse_tour(text: str) -> List[int]:
    body = text.strip().strip('[]').strip()
    if not body:
        return []
    return [int(tok) for tok in body.split('-')]


def write_trace(path: str, trace: Sequence[Tuple[int, int]]) -> None:
    with open(path, 'w') as f:
        f.writelines(f"{elapsed}, {cost}\n" for elapsed, cost in trace)


def write_result(path: str, duration_ns: int, cost: int, tour: Sequence[int]) -> None:
    with open(path, 'w') as f:
        f.write(f"{duration_ns}, {cost}, {format_tour(tour)}\n")


def read_result(path: str) -> Tuple[int, int, List[int]]:
    with open(path, 'r') as f:
        line = f.readline().strip()
    parts = line.split(',', 2)
    if len(parts) != 3:
        raise ValueError(f"{path}: expected 'duration_ns, cost, path', got {line!r}")
    try:
        return int(parts[0]), int(parts[1]), parse_tour(parts[2])
    except ValueError as e:
        raise ValueError(f"{path}: malformed result line {line!r}: {e}") from None


def load_trace(path: str) -> pd.DataFrame:
    if os.path.getsize(path) == 0:
        return pd.DataFrame({c: pd.Series(dtype='int64') for c in TRACE_COLUMNS})
    return pd.read_csv(path, header=None, names=TRACE_COLUMNS, skipinitialspace=True)
