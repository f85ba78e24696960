import json
import threading

import numpy as np
import pytest

from ga_individual import GENOME_LENGTH, STUCK_LIMIT, Individual, run_episode
from pac_config import ConfigError, make_config
from pac_env import ACTIONS, OBS_INDEX, OBS_LABELS, STOP, PacEnv
from pac_maze import Maze
from seeded_rng import LCGRandom

DOWN = ACTIONS.index("DOWN")
RIGHT = ACTIONS.index("RIGHT")


def _obs(**features):
    obs = np.zeros(len(OBS_LABELS))
    obs[OBS_INDEX["bias"]] = 1.0
    for name, value in features.items():
        obs[OBS_INDEX[name]] = value
    return obs


def test_genome_length():
    assert GENOME_LENGTH == 85
    ind = Individual(rng=LCGRandom(1))
    assert ind.genes.shape == (85,)
    assert np.all(np.abs(ind.genes) <= 1.0)
    assert ind.fitness is None
    assert ind.weights.shape == (5, 17)


def test_wrong_length_raises():
    with pytest.raises(ConfigError):
        Individual([0.0] * 84)
    with pytest.raises(ConfigError):
        Individual.from_dict({"genes": [0.0] * 10})
    with pytest.raises(ConfigError):
        Individual()


def test_export_round_trip():
    ind = Individual(rng=LCGRandom(4))
    ind.fitness = 12.5
    data = json.loads(json.dumps(ind.to_dict(3, {"seed": 1})))
    assert data["generation"] == 3
    assert data["config"] == {"seed": 1}
    assert "timestamp" in data
    back = Individual.from_dict(data)
    assert np.array_equal(back.genes, ind.genes)
    assert back.fitness == 12.5
    for obs in (_obs(), _obs(pellets_left=0.5, ghost_dx=-0.2), _obs(blocked_up=1.0, pellet_dy=0.3)):
        assert back.select_action(obs) == ind.select_action(obs)


def test_clone_is_independent():
    ind = Individual(rng=LCGRandom(4))
    ind.fitness = 3.0
    ind.select_action(_obs())
    twin = ind.clone()
    assert twin.fitness == 3.0
    assert twin.last_action is None
    twin.genes[0] = 99.0
    assert ind.genes[0] != 99.0


def test_linear_scores_pick_action():
    genes = np.zeros(GENOME_LENGTH)
    ind = Individual(genes)
    ind.weights[DOWN, OBS_INDEX["bias"]] = 5.0
    assert ind.select_action(_obs()) == DOWN


def test_all_blocked_means_stop():
    ind = Individual(rng=LCGRandom(2))
    obs = _obs(blocked_up=1.0, blocked_down=1.0, blocked_left=1.0, blocked_right=1.0)
    assert ind.select_action(obs) == STOP


def test_flat_scores_follow_pellets():
    ind = Individual(np.zeros(GENOME_LENGTH))
    assert ind.select_action(_obs(pellets_right=0.6)) == RIGHT


def test_stuck_policy_explores():
    ind = Individual(np.zeros(GENOME_LENGTH))
    ind.weights[STOP, OBS_INDEX["bias"]] = 5.0
    obs = _obs(pellets_right=0.4)
    picks = [ind.select_action(obs) for _ in range(STUCK_LIMIT + 2)]
    assert picks[: STUCK_LIMIT + 1] == [STOP] * (STUCK_LIMIT + 1)
    assert picks[-1] == RIGHT


def test_evaluate_is_repeatable():
    env = PacEnv(make_config(max_steps=60))
    ind = Individual(rng=LCGRandom(8))
    first = ind.evaluate(env, [1, 2])
    assert ind.fitness == first
    assert ind.evaluate(env, [1, 2]) == first
    assert ind.evaluate(env, []) == 0.0


def test_run_episode_summary_and_cancel():
    env = PacEnv(make_config(max_steps=30), maze=Maze(["#####", "#P  #", "#####"]))
    ind = Individual(np.zeros(GENOME_LENGTH))
    seen = []
    summary = run_episode(env, ind, seed=1, on_step=seen.append)
    assert summary["cleared"] is True
    assert summary["steps"] == 1
    assert len(seen) == 1 and seen[0]["done"] is True
    assert summary["reward"] == env.total_reward

    stop = threading.Event()
    stop.set()
    summary = run_episode(env, ind, seed=1, stop_event=stop)
    assert summary["cancelled"] is True
    assert summary["steps"] == 0
