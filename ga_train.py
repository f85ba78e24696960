import argparse
import json
import os
import threading
import time

from ga_algorithm import GeneticAlgorithm
from ga_individual import run_episode
from pac_config import CONFIG_PATH, ConfigError, load_config, validate_config

LOG_PATH = os.path.join(os.path.dirname(__file__), "ga_log.jsonl")
BEST_PATH = os.path.join(os.path.dirname(__file__), "best_individual.json")


def apply_overrides(cfg, args):
    overrides = {
        "population_size": args.population,
        "generations": args.generations,
        "crossover_rate": args.crossover_rate,
        "mutation_rate": args.mutation_rate,
        "selection_rate": args.selection_rate,
        "tournament_size": args.tournament_size,
        "elitism_count": args.elitism,
        "episodes_per_individual": args.episodes,
        "max_steps": args.max_steps,
        "seed": args.seed,
    }
    for k, v in overrides.items():
        if v is not None:
            cfg[k] = v
    return cfg


def save_best(path, individual, generation, config):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(individual.to_dict(generation, config), f, indent=2)


def main():
    parser = argparse.ArgumentParser(description="Evolve a Pac-Man policy with a genetic algorithm.")
    parser.add_argument("--config", default=CONFIG_PATH)
    parser.add_argument("--population", type=int, default=None)
    parser.add_argument("--generations", type=int, default=None)
    parser.add_argument("--crossover-rate", type=float, default=None)
    parser.add_argument("--mutation-rate", type=float, default=None)
    parser.add_argument("--selection-rate", type=float, default=None)
    parser.add_argument("--tournament-size", type=int, default=None)
    parser.add_argument("--elitism", type=int, default=None)
    parser.add_argument("--episodes", type=int, default=None, help="episodes per individual")
    parser.add_argument("--max-steps", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--log", default=LOG_PATH)
    parser.add_argument("--out", default=BEST_PATH)
    args = parser.parse_args()

    cfg = apply_overrides(load_config(args.config), args)
    try:
        validate_config(cfg)
    except ConfigError as e:
        parser.error(str(e))

    ga = GeneticAlgorithm(cfg)
    stop_event = threading.Event()
    started = time.time()
    print(
        f"GA: population={ga.population_size} generations={ga.generations} "
        f"episodes={len(ga.episode_seeds)} seed={ga.seed}"
    )

    def on_generation(stats, best):
        replay = run_episode(ga.env, best.clone(), seed=ga.episode_seeds[0])
        with open(args.log, "a", encoding="utf-8") as f:
            f.write(
                json.dumps(
                    {
                        "ts": time.time(),
                        "generation": stats["generation"],
                        "best": stats["best_fitness"],
                        "average": stats["avg_fitness"],
                        "worst": stats["worst_fitness"],
                        "best_score": replay["score"],
                        "best_pellets": replay["pellets_eaten"],
                    }
                )
                + "\n"
            )
        print(
            f"Gen {stats['generation']:4d} | best={stats['best_fitness']:.1f} "
            f"avg={stats['avg_fitness']:.1f} worst={stats['worst_fitness']:.1f} "
            f"| score={replay['score']} pellets={replay['pellets_eaten']} "
            f"dead={replay['dead']} cleared={replay['cleared']}"
        )

    try:
        ga.run(stop_event=stop_event, on_generation=on_generation)
    except KeyboardInterrupt:
        stop_event.set()
        print("Interrupted, saving best so far.")

    best = ga.best_individual
    if best is None:
        print("No individual was evaluated; nothing saved.")
        return
    save_best(args.out, best, ga.generation, cfg)
    print(f"Saved {args.out} | fitness={best.fitness:.1f} | {time.time() - started:.1f}s")


if __name__ == "__main__":
    main()
