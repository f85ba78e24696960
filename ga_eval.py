import argparse
import json

import numpy as np

from ga_individual import Individual, run_episode
from ga_train import BEST_PATH
from pac_config import CONFIG_PATH, load_config, make_config
from pac_env import PacEnv
from seeded_rng import LCGRandom


def load_individual(path):
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return Individual.from_dict(data), data


def main():
    parser = argparse.ArgumentParser(description="Replay an exported policy headlessly.")
    parser.add_argument("--individual", default=BEST_PATH)
    parser.add_argument("--config", default=CONFIG_PATH)
    parser.add_argument("--games", type=int, default=10)
    parser.add_argument("--max-steps", type=int, default=None)
    parser.add_argument("--seed", type=int, default=123)
    parser.add_argument("--use-export-config", action="store_true", help="run with the config saved in the export")
    args = parser.parse_args()

    individual, data = load_individual(args.individual)
    if args.use_export_config and isinstance(data.get("config"), dict):
        cfg = make_config(data["config"])
    else:
        cfg = load_config(args.config)
    if args.max_steps is not None:
        cfg["max_steps"] = args.max_steps
    cfg["render"] = False
    env = PacEnv(cfg)

    rng = LCGRandom(args.seed)
    seeds = [rng.next_u32() for _ in range(args.games)]

    results = [run_episode(env, individual, seed=s) for s in seeds]
    rewards = [r["reward"] for r in results]
    scores = [r["score"] for r in results]
    deaths = sum(1 for r in results if r["dead"])
    clears = sum(1 for r in results if r["cleared"])

    reward_mean = float(np.mean(rewards)) if rewards else 0.0
    score_mean = float(np.mean(scores)) if scores else 0.0
    print(
        f"Games: {len(results)} | reward avg: {reward_mean:.1f} max: {max(rewards, default=0.0):.1f} "
        f"| score avg: {score_mean:.1f} max: {max(scores, default=0)} | deaths={deaths} clears={clears}"
    )


if __name__ == "__main__":
    main()
