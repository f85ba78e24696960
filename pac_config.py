import copy
import json
import os


class ConfigError(ValueError):
    pass


REWARDS = {
    "step": 0.1,
    "pellet": 10.0,
    "power_pellet": 50.0,
    "ghost": 200.0,
    "combo": 1.0,
    "combo_cap": 10,
    "combo_window": 8,
    "milestones": {"0.25": 100.0, "0.5": 250.0, "0.75": 500.0},
    "clear": 1000.0,
    "idle": -0.5,
    "loop": -2.0,
    "loop_window": 12,
    "loop_distinct": 3,
    "danger": -1.0,
    "corner_danger": -3.0,
    "danger_tiles": 3.0,
    "death": -500.0,
}

POINTS = {
    "pellet": 10,
    "power_pellet": 50,
    "ghost": 200,
}

DEFAULT_CONFIG = {
    # simulation
    "tile_size": 20,
    "max_steps": 3000,
    "render": False,
    "num_ghosts": 4,
    "vulnerable_ticks": 300,
    "player_speed_div": 5,
    "ghost_speed_div": 6,
    "ghost_chase_interval": 15,
    "ghost_chase_prob": 0.7,
    "ghost_flee_interval": 10,
    "ghost_flee_prob": 0.3,
    # genetic algorithm
    "population_size": 20,
    "generations": 50,
    "selection_rate": None,
    "crossover_rate": 0.7,
    "mutation_rate": 0.1,
    "tournament_size": 3,
    "elitism_count": 1,
    "episodes_per_individual": 1,
    "seed": 12345,
    "mutation_sigma": 0.3,
    "gene_limit": 2.0,
    "init_range": 1.0,
    # viewer
    "fps": 30,
    "rewards": REWARDS,
    "points": POINTS,
}

CONFIG_PATH = os.path.join(os.path.dirname(__file__), "config.json")


# nested dicts whose keys are data rather than settings
OPEN_KEYS = {"milestones"}


def _merge(base, data, prefix=""):
    """Overlay data onto base in place; returns the dotted names of keys it did not know."""
    unknown = []
    for k, v in data.items():
        name = prefix + str(k)
        if k not in base:
            unknown.append(name)
        elif k in OPEN_KEYS and isinstance(v, dict):
            base[k].update(v)
        elif isinstance(base[k], dict) and isinstance(v, dict):
            unknown.extend(_merge(base[k], v, name + "."))
        else:
            base[k] = v
    return unknown


def make_config(overrides=None, **kwargs):
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    unknown = []
    if overrides:
        unknown.extend(_merge(cfg, overrides))
    if kwargs:
        unknown.extend(_merge(cfg, kwargs))
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(unknown)}")
    return cfg


def load_config(path=CONFIG_PATH):
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
            if isinstance(data, dict):
                for name in _merge(cfg, data):
                    print(f"[WARN] Ignoring unknown key {name!r} in {path}")
    except FileNotFoundError:
        pass
    except json.JSONDecodeError as e:
        print(f"[WARN] Ignoring malformed {path}: {e}")
    return cfg


def validate_config(cfg):
    """Raise ConfigError for settings a GA run cannot start with.

    The three operator rates are only required to sum to 1.0 when
    ``selection_rate`` is given explicitly; they are never renormalised.
    """
    for key in ("crossover_rate", "mutation_rate"):
        rate = float(cfg[key])
        if not 0.0 <= rate <= 1.0:
            raise ConfigError(f"{key} must be in [0, 1], got {rate}")

    selection = cfg.get("selection_rate")
    if selection is not None:
        selection = float(selection)
        if not 0.0 <= selection <= 1.0:
            raise ConfigError(f"selection_rate must be in [0, 1], got {selection}")
        total = selection + float(cfg["crossover_rate"]) + float(cfg["mutation_rate"])
        if abs(total - 1.0) > 1e-9:
            raise ConfigError(
                f"selection_rate + crossover_rate + mutation_rate must sum to 1.0, got {total:.6f}"
            )

    pop = int(cfg["population_size"])
    if pop < 1:
        raise ConfigError(f"population_size must be >= 1, got {pop}")
    if int(cfg["generations"]) < 0:
        raise ConfigError(f"generations must be >= 0, got {cfg['generations']}")
    if int(cfg["episodes_per_individual"]) < 1:
        raise ConfigError("episodes_per_individual must be >= 1")
    if int(cfg["max_steps"]) < 1:
        raise ConfigError(f"max_steps must be >= 1, got {cfg['max_steps']}")
    if not 1 <= int(cfg["tournament_size"]) <= pop:
        raise ConfigError(f"tournament_size must be in [1, {pop}], got {cfg['tournament_size']}")
    if not 0 <= int(cfg["elitism_count"]) <= pop:
        raise ConfigError(f"elitism_count must be in [0, {pop}], got {cfg['elitism_count']}")
    if int(cfg["tile_size"]) <= 0:
        raise ConfigError("tile_size must be positive")
    if float(cfg["mutation_sigma"]) < 0 or float(cfg["gene_limit"]) < 0:
        raise ConfigError("mutation_sigma and gene_limit must be non-negative")
    return cfg
