"""Run defaults for the annealing CLI.

Values can be overridden through environment variables, e.g.
``TSP_ANNEAL_TIME_LIMIT=60 tsp-anneal -i in.csv``.
"""
import os
from typing import Optional

# Annealing schedule
TEMPERATURE = 1000.0           # initial temperature
ERA_LEN = 100_000              # iterations per temperature step
COOLANT = 0.9                  # cooling multiplier applied after each era
TEMPERATURE_FLOOR = 0.1        # run stops once the temperature drops below this

# Harness
NUMBER_OF_TESTS = 10
TIME_LIMIT = 1800              # wall-clock seconds per run before the process is aborted
MEM_SAMPLE_INTERVAL = 0.05     # seconds between memory samples
SEED: Optional[int] = None     # None -> fresh entropy for every run

# Random graph generation
RANDOM_VERTICES = 20
RANDOM_WEIGHT_RANGE = (1, 100)
RANDOM_ADDITIONAL_EDGES = 0

DEFAULT_INPUT = "in.csv"
INPUT_TYPES = ("full_table", "edge_list", "random")


def _env_number(name: str, default, cast):
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        print(f"[warn] ignoring {name}={raw!r}: not a valid {cast.__name__}")
        return default


TIME_LIMIT = _env_number('TSP_ANNEAL_TIME_LIMIT', TIME_LIMIT, float)
MEM_SAMPLE_INTERVAL = _env_number('TSP_ANNEAL_MEM_SAMPLE_INTERVAL', MEM_SAMPLE_INTERVAL, float)
SEED = _env_number('TSP_ANNEAL_SEED', SEED, int)
