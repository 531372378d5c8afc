import itertools

import numpy as np
import pytest

from tsp_anneal.annealing import AnnealingConfig, anneal, metropolis_accept
from tsp_anneal.graph import Graph


class FixedDraw:
    """Stand-in generator whose uniform draw is always `value`."""

    def __init__(self, value):
        self.value = value
        self.calls = 0

    def random(self):
        self.calls += 1
        return self.value


def small_config(**overrides):
    params = dict(temperature=50.0, era_len=200, temperature_floor=1.0, coolant=0.7)
    params.update(overrides)
    return AnnealingConfig(**params)


# --- acceptance rule ---

def test_improvements_and_ties_always_accepted():
    rng = FixedDraw(0.999)
    assert metropolis_accept(-10, 1.0, rng)
    assert metropolis_accept(0, 1e-12, rng)
    assert rng.calls == 0


def test_worsening_move_uses_exponential_chance():
    # exp(-1) ~= 0.368
    assert metropolis_accept(1, 1.0, FixedDraw(0.3))
    assert not metropolis_accept(1, 1.0, FixedDraw(0.4))


def test_worsening_move_rejected_when_chance_underflows():
    assert not metropolis_accept(1, 1e-9, FixedDraw(0.0))


# --- configuration ---

@pytest.mark.parametrize("overrides,match", [
    (dict(coolant=1.0), "Cooling multiplier"),
    (dict(coolant=1.5), "Cooling multiplier"),
    (dict(coolant=0.0), "Cooling multiplier"),
    (dict(temperature_floor=0.0), "floor"),
    (dict(temperature_floor=-1.0), "floor"),
    (dict(temperature=0.0), "Initial temperature"),
    (dict(era_len=0), "Era length"),
])
def test_invalid_config_rejected(overrides, match):
    with pytest.raises(ValueError, match=match):
        small_config(**overrides).validate(5)


def test_cooling_multiplier_one_never_starts(complete_graph):
    calls = []
    with pytest.raises(ValueError, match="Cooling multiplier"):
        anneal(complete_graph, complete_graph.number_of_vertex, small_config(coolant=1.0),
               rng=np.random.default_rng(0), progress=lambda *a: calls.append(a))
    assert calls == []


def test_too_few_vertices_rejected():
    graph = Graph(1)
    with pytest.raises(ValueError, match="at least 2 vertices"):
        anneal(graph, 1, small_config(), rng=np.random.default_rng(0))


def test_expected_eras():
    cfg = AnnealingConfig(temperature=10.0, era_len=1, temperature_floor=1.0, coolant=0.5)
    # 10 -> 5 -> 2.5 -> 1.25 -> 0.625
    assert cfg.expected_eras() == 4
    assert AnnealingConfig(temperature=0.5, temperature_floor=1.0, coolant=0.9).expected_eras() == 1


# --- optimizer ---

def test_result_is_permutation_and_cost_matches(complete_graph):
    n = complete_graph.number_of_vertex
    result = anneal(complete_graph, n, small_config(), rng=np.random.default_rng(1))
    assert sorted(result.tour) == list(range(1, n + 1))
    assert result.accepted > 0
    assert result.cost == complete_graph.distance_cycle(result.tour)
    assert len(result.trace) == result.accepted
    assert result.trace[-1][1] == result.cost
    assert result.best_cost is None and result.best_tour is None


def test_schedule_counts(complete_graph):
    cfg = small_config()
    eras_seen = []
    result = anneal(complete_graph, complete_graph.number_of_vertex, cfg, rng=np.random.default_rng(2),
                    progress=lambda era, temperature, cost: eras_seen.append((era, temperature)))
    assert result.eras == cfg.expected_eras()
    assert result.iterations == result.eras * cfg.era_len
    assert [e for e, _ in eras_seen] == list(range(1, result.eras + 1))
    assert eras_seen[-1][1] == pytest.approx(result.final_temperature)
    assert result.final_temperature < cfg.temperature_floor


def test_seeded_runs_are_reproducible(complete_graph):
    n = complete_graph.number_of_vertex
    a = anneal(complete_graph, n, small_config(), rng=np.random.default_rng(7))
    b = anneal(complete_graph, n, small_config(), rng=np.random.default_rng(7))
    assert a.tour == b.tour
    assert a.cost == b.cost
    assert [c for _, c in a.trace] == [c for _, c in b.trace]


def test_no_worsening_move_at_near_zero_temperature(complete_graph):
    n = complete_graph.number_of_vertex
    cfg = AnnealingConfig(temperature=1e-9, era_len=2000, temperature_floor=1e-12, coolant=0.5)
    result = anneal(complete_graph, n, cfg, rng=np.random.default_rng(123))
    costs = [complete_graph.distance_vec(list(range(1, n + 1)))] + [c for _, c in result.trace]
    assert all(b <= a for a, b in zip(costs, costs[1:]))


def test_initial_cost_is_open_path_by_default():
    # Every swap of the identity tour on this graph costs more than its open path,
    # so at zero-ish temperature nothing is ever accepted.
    graph = Graph.from_edges(3, [(1, 2, 1), (2, 3, 1), (1, 3, 100)])
    graph.set_zero_to_max()
    cfg = AnnealingConfig(temperature=1e-9, era_len=50, temperature_floor=1e-10, coolant=0.5)
    result = anneal(graph, 3, cfg, rng=np.random.default_rng(0))
    assert result.accepted == 0
    assert result.cost == 2
    assert result.tour == [1, 2, 3]

    normalized = anneal(graph, 3, AnnealingConfig(temperature=1e-9, era_len=50, temperature_floor=1e-10,
                                                  coolant=0.5, cycle_initial_cost=True),
                        rng=np.random.default_rng(0))
    # every 3-cycle has the same cost, so equal-cost swaps are accepted
    assert normalized.accepted > 0
    assert normalized.cost == 102


def test_best_cost_is_a_cycle_cost_with_open_path_start():
    graph = Graph.from_edges(3, [(1, 2, 1), (2, 3, 1), (1, 3, 100)])
    graph.set_zero_to_max()
    cfg = AnnealingConfig(temperature=1e-9, era_len=50, temperature_floor=1e-10, coolant=0.5, track_best=True)
    result = anneal(graph, 3, cfg, rng=np.random.default_rng(0))
    assert result.cost == 2
    assert result.best_tour == [1, 2, 3]
    assert result.best_cost == graph.distance_cycle(result.best_tour) == 102


@pytest.mark.parametrize("cycle_initial_cost", [False, True])
def test_track_best_keeps_final_state_semantics(complete_graph, cycle_initial_cost):
    n = complete_graph.number_of_vertex
    cfg = small_config(track_best=True, cycle_initial_cost=cycle_initial_cost)
    result = anneal(complete_graph, n, cfg, rng=np.random.default_rng(5))
    plain = anneal(complete_graph, n, small_config(cycle_initial_cost=cycle_initial_cost),
                   rng=np.random.default_rng(5))
    assert result.cost == plain.cost
    assert result.tour == plain.tour
    assert result.best_cost <= result.cost
    assert result.best_cost == complete_graph.distance_cycle(result.best_tour)
    assert result.best_cost == min([complete_graph.distance_cycle(list(range(1, n + 1)))]
                                   + [c for _, c in result.trace])


def test_finds_optimum_on_small_graph(complete_graph):
    n = complete_graph.number_of_vertex
    optimum = min(
        complete_graph.distance_cycle([1] + list(p))
        for p in itertools.permutations(range(2, n + 1))
    )
    cfg = AnnealingConfig(temperature=100.0, era_len=3000, temperature_floor=0.1, coolant=0.8, track_best=True)
    result = anneal(complete_graph, n, cfg, rng=np.random.default_rng(0))
    assert result.best_cost <= optimum * 1.2


def test_trace_uses_injected_clock(complete_graph):
    ticks = itertools.count(start=1000, step=10)
    result = anneal(complete_graph, complete_graph.number_of_vertex, small_config(),
                    rng=np.random.default_rng(3), clock=lambda: next(ticks))
    stamps = [t for t, _ in result.trace]
    assert stamps[0] == 10
    assert stamps == sorted(stamps)
    assert len(set(stamps)) == len(stamps)
