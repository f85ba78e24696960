from datetime import datetime

import numpy as np

from pac_config import ConfigError
from pac_env import ACTIONS, OBS_INDEX, OBS_LABELS, STOP
from pac_maze import MOVE_DIRS


GENOME_LENGTH = len(OBS_LABELS) * len(ACTIONS)
CONTINUITY_BONUS = 0.5
STUCK_LIMIT = 3

BLOCKED = slice(0, len(MOVE_DIRS))
SIGHT = [OBS_INDEX[n] for n in ("pellets_up", "pellets_down", "pellets_left", "pellets_right")]
PELLET_FEATURES = [OBS_INDEX[n] for n in ("pellet_dx", "pellet_dy", "pellet_dist")]


class Individual:
    """Linear policy: one weight row per action, scored against the observation."""

    def __init__(self, genes=None, rng=None, init_range=1.0):
        if genes is None:
            if rng is None:
                raise ConfigError("an Individual needs either genes or an rng")
            genes = [rng.uniform(-init_range, init_range) for _ in range(GENOME_LENGTH)]
        genes = np.array(genes, dtype=np.float64)
        if genes.shape != (GENOME_LENGTH,):
            raise ConfigError(f"genome must have {GENOME_LENGTH} genes, got shape {genes.shape}")
        self.genes = genes
        self.fitness = None
        self.reset_memory()

    @property
    def weights(self):
        return self.genes.reshape(len(ACTIONS), len(OBS_LABELS))

    def reset_memory(self):
        self.last_action = None
        self.stuck = 0
        self.prev_signature = None

    def _track_stuck(self, obs):
        signature = tuple(obs[BLOCKED]) + tuple(obs[PELLET_FEATURES])
        if signature == self.prev_signature:
            self.stuck += 1
        else:
            self.stuck = 0
        self.prev_signature = signature

    def _explore(self, obs, moves):
        pdx = obs[OBS_INDEX["pellet_dx"]]
        pdy = obs[OBS_INDEX["pellet_dy"]]
        reverse = None
        if self.last_action is not None and self.last_action != STOP:
            last = MOVE_DIRS[self.last_action]
            reverse = (-last[0], -last[1])

        def key(a):
            d = MOVE_DIRS[a]
            return (obs[SIGHT[a]], d[0] * pdx + d[1] * pdy, d != reverse)

        return max(moves, key=key)

    def select_action(self, obs):
        obs = np.asarray(obs, dtype=np.float64)
        self._track_stuck(obs)

        scores = self.weights @ obs
        moves = [a for a in range(len(MOVE_DIRS)) if obs[a] < 0.5]
        candidates = moves + [STOP]
        if self.last_action in candidates:
            scores[self.last_action] += CONTINUITY_BONUS

        choice = candidates[0]
        for a in candidates[1:]:
            if scores[a] > scores[choice]:
                choice = a

        flat = all(scores[a] == scores[choice] for a in candidates)
        if moves and (flat or self.stuck > STUCK_LIMIT):
            choice = self._explore(obs, moves)

        self.last_action = choice
        return choice

    def clone(self):
        twin = Individual(self.genes.copy())
        twin.fitness = self.fitness
        return twin

    def evaluate(self, env, seeds):
        totals = [run_episode(env, self, seed)["reward"] for seed in seeds]
        self.fitness = float(np.mean(totals)) if totals else 0.0
        return self.fitness

    def to_dict(self, generation=0, config=None):
        return {
            "fitness": self.fitness,
            "genes": [float(g) for g in self.genes],
            "generation": int(generation),
            "timestamp": datetime.now().isoformat(),
            "config": config,
        }

    @classmethod
    def from_dict(cls, data):
        if "genes" not in data:
            raise ConfigError("exported individual has no genes")
        ind = cls(data["genes"])
        fitness = data.get("fitness")
        ind.fitness = float(fitness) if fitness is not None else None
        return ind


def run_episode(env, individual, seed=None, stop_event=None, on_step=None):
    """Play one episode; the stop event is only checked between steps."""
    individual.reset_memory()
    obs = env.reset(seed)
    cancelled = False
    while not env.is_terminal():
        if stop_event is not None and stop_event.is_set():
            cancelled = True
            break
        result = env.step(individual.select_action(obs))
        if on_step is not None:
            on_step(result)
        obs = env.observe()
    return {
        "reward": env.total_reward,
        "score": env.score,
        "pellets_eaten": env.pellets_eaten,
        "steps": env.steps,
        "dead": env.is_dead,
        "cleared": env.cleared,
        "cancelled": cancelled,
    }
