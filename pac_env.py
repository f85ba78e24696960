import math
from collections import deque

import numpy as np

from pac_agents import GHOST_KINDS, Ghost, Player
from pac_config import make_config
from pac_maze import DOWN, LEFT, MOVE_DIRS, RIGHT, UP, Maze, PelletField
from seeded_rng import LCGRandom


ACTIONS = ["UP", "DOWN", "LEFT", "RIGHT", "STOP"]
ACTION_DIRS = {"UP": UP, "DOWN": DOWN, "LEFT": LEFT, "RIGHT": RIGHT, "STOP": None}
STOP = ACTIONS.index("STOP")

OBS_LABELS = [
    "blocked_up",
    "blocked_down",
    "blocked_left",
    "blocked_right",
    "ghost_dx",
    "ghost_dy",
    "ghost_dist",
    "ghost_vulnerable",
    "pellet_dx",
    "pellet_dy",
    "pellet_dist",
    "pellets_up",
    "pellets_down",
    "pellets_left",
    "pellets_right",
    "power_time",
    "bias",
]
OBS_INDEX = {name: i for i, name in enumerate(OBS_LABELS)}

SIGHT_RANGE = 8
SIGHT_NORM = sum(1.0 / k for k in range(1, SIGHT_RANGE + 1))


class PacEnv:
    def __init__(self, config=None, maze=None, seed=None):
        self.config = config if config is not None else make_config()
        self.rewards = self.config["rewards"]
        self.points = self.config["points"]
        self.tile = int(self.config["tile_size"])
        self.max_steps = int(self.config["max_steps"])
        self.render = bool(self.config.get("render", False))
        self.vulnerable_ticks = int(self.config["vulnerable_ticks"])
        self.renderer = None

        self.maze = maze if maze is not None else Maze()
        self.field = PelletField(self.maze)
        self.rng = LCGRandom(seed)
        self.seed = seed

        col, row = self.maze.player_start
        self.player = Player(col, row, self.tile, self.tile / float(self.config["player_speed_div"]))
        ghost_speed = self.tile / float(self.config["ghost_speed_div"])
        starts = self.maze.ghost_starts[: int(self.config["num_ghosts"])]
        self.ghosts = [
            Ghost(GHOST_KINDS[i % len(GHOST_KINDS)], gc, gr, self.tile, ghost_speed, self.config)
            for i, (gc, gr) in enumerate(starts)
        ]

        self.width_px = self.maze.width_px(self.tile)
        self.height_px = self.maze.height_px(self.tile)
        self.diag_px = math.hypot(self.width_px, self.height_px)
        self.milestones = sorted((float(k), float(v)) for k, v in self.rewards["milestones"].items())

        self.reset()

    def reset(self, seed=None):
        """Start a fresh episode; without a seed the previous one is reused."""
        if seed is not None:
            self.seed = seed
        self.rng.seed(self.seed)
        self.field.reset()
        self.player.reset()
        for g in self.ghosts:
            g.reset(self.maze, self.rng)

        self.score = 0
        self.pellets_eaten = 0
        self.steps = 0
        self.is_dead = False
        self.cleared = False
        self.done = False
        self.total_reward = 0.0

        self.recent_cells = deque(maxlen=int(self.rewards["loop_window"]))
        self.recent_cells.append(self.player.grid_pos())
        self.idle_steps = 0
        self.combo = 0
        self.steps_since_pellet = None
        self.milestones_paid = set()
        self.last_result = self._result(0.0)
        return self.observe()

    def remaining_pellets(self):
        return self.field.remaining()

    def pellet_grids(self):
        return self.field.copy_grids()

    def is_terminal(self):
        return self.done

    def _action_dir(self, action):
        if isinstance(action, str):
            return ACTION_DIRS.get(action.upper())
        if isinstance(action, (int, np.integer)) and 0 <= int(action) < len(ACTIONS):
            return ACTION_DIRS[ACTIONS[int(action)]]
        return None

    def _result(self, reward):
        return {
            "reward": reward,
            "done": self.done,
            "pellets_eaten": self.pellets_eaten,
            "score": self.score,
            "is_dead": self.is_dead,
        }

    def _nearest(self, targets):
        """Offset and distance to the closest (x, y) in targets, or None."""
        best = None
        for tx, ty in targets:
            dist = math.hypot(tx - self.player.x, ty - self.player.y)
            if best is None or dist < best[2]:
                best = (tx - self.player.x, ty - self.player.y, dist)
        return best

    def _pellet_centres(self):
        cells = self.field.occupied()
        half = self.tile / 2
        return [(c * self.tile + half, r * self.tile + half) for r, c in cells]

    def _line_of_sight(self, col, row, d):
        total = 0.0
        for k in range(1, SIGHT_RANGE + 1):
            c, r = col + d[0] * k, row + d[1] * k
            if self.maze.is_wall(r, c):
                break
            if self.field.has_pellet(r, c):
                total += 1.0 / k
        return total / SIGHT_NORM

    def observe(self):
        obs = np.zeros(len(OBS_LABELS), dtype=np.float64)
        for i, d in enumerate(MOVE_DIRS):
            obs[i] = 0.0 if self.player.can_move(self.maze, d) else 1.0

        ghost = None
        for g in self.ghosts:
            dist = self.player.distance_to(g)
            if ghost is None or dist < ghost[1]:
                ghost = (g, dist)
        if ghost is None:
            obs[OBS_INDEX["ghost_dist"]] = 1.0
        else:
            g, dist = ghost
            obs[OBS_INDEX["ghost_dx"]] = (g.x - self.player.x) / self.width_px
            obs[OBS_INDEX["ghost_dy"]] = (g.y - self.player.y) / self.height_px
            obs[OBS_INDEX["ghost_dist"]] = dist / self.diag_px
            obs[OBS_INDEX["ghost_vulnerable"]] = 1.0 if g.vulnerable else 0.0

        pellet = self._nearest(self._pellet_centres())
        if pellet is None:
            obs[OBS_INDEX["pellet_dist"]] = 1.0
        else:
            obs[OBS_INDEX["pellet_dx"]] = pellet[0] / self.width_px
            obs[OBS_INDEX["pellet_dy"]] = pellet[1] / self.height_px
            obs[OBS_INDEX["pellet_dist"]] = pellet[2] / self.diag_px

        col, row = self.player.grid_pos()
        for name, d in zip(("pellets_up", "pellets_down", "pellets_left", "pellets_right"), MOVE_DIRS):
            obs[OBS_INDEX[name]] = self._line_of_sight(col, row, d)

        if self.vulnerable_ticks > 0 and self.ghosts:
            longest = max(g.vulnerable_timer for g in self.ghosts)
            obs[OBS_INDEX["power_time"]] = longest / float(self.vulnerable_ticks)
        obs[OBS_INDEX["bias"]] = 1.0
        return obs

    def step(self, action):
        if self.done:
            return dict(self.last_result, reward=0.0)

        d = self._action_dir(action)
        if d is not None:
            self.player.set_direction(d)

        moved = self.player.update(self.maze)
        for g in self.ghosts:
            g.update(self.maze, self.player, self.rng)
        for g in self.ghosts:
            g.tick_vulnerability()

        r = self.rewards
        reward = float(r["step"])

        if self.steps_since_pellet is not None:
            self.steps_since_pellet += 1
        col, row = self.player.grid_pos()
        eaten = self.field.consume(row, col)
        if eaten is not None:
            self.score += int(self.points[eaten])
            self.pellets_eaten += 1
            reward += float(r[eaten])
            if self.steps_since_pellet is not None and self.steps_since_pellet <= int(r["combo_window"]):
                self.combo = min(self.combo + 1, int(r["combo_cap"]))
            else:
                self.combo = 1
            self.steps_since_pellet = 0
            reward += float(r["combo"]) * (self.combo - 1)
            if eaten == "power_pellet":
                for g in self.ghosts:
                    g.make_vulnerable(self.vulnerable_ticks)

        for g in self.ghosts:
            if not self.player.touches(g):
                continue
            if g.vulnerable:
                g.reset(self.maze, self.rng)
                self.score += int(self.points["ghost"])
                reward += float(r["ghost"])
            else:
                self.is_dead = True
                break

        self.steps += 1

        if self.is_dead:
            reward = float(r["death"])
        else:
            reward += self._shaping(moved, col, row)

        remaining = self.field.remaining()
        self.cleared = self.field.total > 0 and remaining == 0
        if self.cleared and not self.is_dead:
            reward += float(r["clear"])
        self.done = self.is_dead or self.cleared or self.steps >= self.max_steps

        self.total_reward += reward
        self.last_result = self._result(reward)
        if self.render and self.renderer is not None:
            self.renderer(self.snapshot())
        return self.last_result

    def _shaping(self, moved, col, row):
        r = self.rewards
        reward = 0.0

        total = self.field.total
        fraction = self.pellets_eaten / float(total) if total > 0 else 0.0
        for threshold, bonus in self.milestones:
            if fraction >= threshold and threshold not in self.milestones_paid:
                self.milestones_paid.add(threshold)
                reward += bonus

        if moved:
            self.idle_steps = 0
        else:
            self.idle_steps += 1
            reward += float(r["idle"])

        if (col, row) != self.recent_cells[-1]:
            self.recent_cells.append((col, row))
        window = int(r["loop_window"])
        if len(self.recent_cells) >= window and len(set(self.recent_cells)) <= int(r["loop_distinct"]):
            reward += float(r["loop"])

        radius = float(r["danger_tiles"]) * self.tile
        near = [g for g in self.ghosts if not g.vulnerable and self.player.distance_to(g) <= radius]
        if near:
            reward += float(r["danger"])
            if len(near) >= 2:
                reward += float(r["corner_danger"])
        return reward

    def snapshot(self):
        return {
            "grid_w": self.maze.width,
            "grid_h": self.maze.height,
            "tile": self.tile,
            "maze": list(self.maze.rows),
            "score": self.score,
            "steps": self.steps,
            "pellets_eaten": self.pellets_eaten,
            "remaining": self.field.remaining(),
            "total_reward": self.total_reward,
            "player": {
                "x": self.player.x,
                "y": self.player.y,
                "dir": self.player.dir,
                "radius": self.player.radius,
            },
            "ghosts": [
                {
                    "x": g.x,
                    "y": g.y,
                    "kind": g.kind,
                    "mode": g.mode,
                    "vulnerable": g.vulnerable,
                    "vulnerable_timer": g.vulnerable_timer,
                    "radius": g.radius,
                }
                for g in self.ghosts
            ],
            "pellets": [(int(c), int(r)) for r, c in np.argwhere(self.field.pellets)],
            "power": [(int(c), int(r)) for r, c in np.argwhere(self.field.power)],
            "is_dead": self.is_dead,
            "cleared": self.cleared,
            "done": self.done,
        }
