"""Simulated annealing for the Traveling-Salesman problem on dense weighted graphs."""

from .annealing import AnnealingConfig, AnnealingResult, anneal, metropolis_accept
from .graph import MAX_WEIGHT, Graph

__all__ = [
    "AnnealingConfig",
    "AnnealingResult",
    "Graph",
    "MAX_WEIGHT",
    "anneal",
    "metropolis_accept",
]

__version__ = "0.1.0"
