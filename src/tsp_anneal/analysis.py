"""Summaries and plots over annealing run artifacts.

Usage:
    tsp-anneal-plot in.csv_0.plot.csv trace.png
    tsp-anneal-plot in.csv_0.plot.csv trace.png --results "in.csv_*.out.csv"
"""
from __future__ import annotations

import argparse
import glob
import os
from typing import List, Optional, Sequence

import matplotlib.pyplot as plt
import pandas as pd

from .artifacts import load_trace, read_result


def load_results(result_paths: Sequence[str]) -> pd.DataFrame:
    """One row per result file: path, duration_ns, cost, n."""
    rows = []
    for path in result_paths:
        duration_ns, cost, tour = read_result(path)
        rows.append({'result': os.path.basename(path), 'duration_ns': duration_ns, 'cost': cost, 'n': len(tour)})
    return pd.DataFrame(rows, columns=['result', 'duration_ns', 'cost', 'n'])


def summarize(df: pd.DataFrame) -> Optional[pd.DataFrame]:
    """Aggregate cost and runtime over all runs of one input."""
    if df is None or df.empty:
        return None
    seconds = df['duration_ns'] / 1e9
    summary = pd.DataFrame([{
        'n': int(df['n'].iloc[0]),
        'runs': len(df),
        'cost_best': df['cost'].min(),
        'cost_mean': df['cost'].mean(),
        'cost_std': df['cost'].std(),
        'cost_worst': df['cost'].max(),
        'runtime_mean': seconds.mean(),
        'runtime_std': seconds.std(),
    }])
    return summary


def plot_trace(trace_path: str, png_path: str, title: Optional[str] = None) -> int:
    """Plot accepted cost over elapsed time; returns the number of plotted points."""
    data = load_trace(trace_path)
    fig, ax = plt.subplots(figsize=(8, 6))
    ax.plot(data['elapsed_ns'] / 1e9, data['cost'], linewidth=0.8, label='Accepted cost')
    ax.set_xlabel('Elapsed time (s)')
    ax.set_ylabel('Tour cost')
    ax.set_title(title or f'Simulated Annealing trace ({os.path.basename(trace_path)})')
    ax.legend()
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(png_path, dpi=200)
    plt.close(fig)
    return len(data)


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="Plot an annealing trace and summarize run results")
    ap.add_argument('trace', help='Trace file written by tsp-anneal (<input>_<run>.plot.csv)')
    ap.add_argument('output', help='PNG file to write')
    ap.add_argument('--results', help='Glob of result files to summarize, e.g. "in.csv_*.out.csv"')
    args = ap.parse_args(argv)

    points = plot_trace(args.trace, args.output)
    print(f"✓ Plot saved to {args.output} ({points} points)")

    if args.results:
        paths = sorted(glob.glob(args.results))
        if not paths:
            print(f"[warn] no result files match {args.results}")
            return
        summary = summarize(load_results(paths))
        print(summary.to_string(index=False))


if __name__ == '__main__':  # pragma: no cover
    main()
