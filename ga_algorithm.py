import numpy as np

from ga_individual import GENOME_LENGTH, Individual
from ga_population import Population
from pac_config import make_config, validate_config
from pac_env import PacEnv
from seeded_rng import LCGRandom


class GeneticAlgorithm:
    """Tournament-selection GA over linear policies, scored by PacEnv episodes.

    All randomness comes from one LCG seeded from the config (or ``seed``).
    The episode seeds are drawn from it once, so every individual in every
    generation is judged against the same ghost randomness.
    """

    def __init__(self, config=None, seed=None, env=None):
        self.config = validate_config(config if config is not None else make_config())
        self.seed = int(seed if seed is not None else self.config["seed"])
        self.rng = LCGRandom(self.seed)

        self.population_size = int(self.config["population_size"])
        self.generations = int(self.config["generations"])
        self.crossover_rate = float(self.config["crossover_rate"])
        self.mutation_rate = float(self.config["mutation_rate"])
        self.tournament_size = int(self.config["tournament_size"])
        self.elitism_count = int(self.config["elitism_count"])
        self.mutation_sigma = float(self.config["mutation_sigma"])
        self.gene_limit = float(self.config["gene_limit"])

        episodes = int(self.config["episodes_per_individual"])
        self.episode_seeds = [self.rng.next_u32() for _ in range(episodes)]
        self.env = env if env is not None else PacEnv(self.config)
        self.population = Population(self.config, self.rng)

        self.generation = 0
        self.history = []
        self.best_individual = None
        self._evaluated_once = False

    def evaluate_population(self):
        self.population.evaluate(self.env, self.episode_seeds, only_unscored=not self._evaluated_once)
        self._evaluated_once = True
        best = self.population.get_best_individual()
        if best is not None and (self.best_individual is None or best.fitness > self.best_individual.fitness):
            self.best_individual = best.clone()
        return best

    def tournament_select(self, k=None):
        k = self.tournament_size if k is None else int(k)
        pool = self.population.individuals
        winner = None
        for _ in range(max(1, k)):
            ind = pool[self.rng.randrange(len(pool))]
            if winner is None or _fitness(ind) > _fitness(winner):
                winner = ind
        return winner

    def crossover(self, p1, p2):
        if self.rng.random() < self.crossover_rate:
            cut = self.rng.randrange(GENOME_LENGTH)
            a = np.concatenate([p1.genes[:cut], p2.genes[cut:]])
            b = np.concatenate([p2.genes[:cut], p1.genes[cut:]])
            return Individual(a), Individual(b)
        return Individual(p1.genes.copy()), Individual(p2.genes.copy())

    def mutate(self, ind):
        genes = ind.genes
        for i in range(len(genes)):
            if self.rng.random() < self.mutation_rate:
                g = genes[i] + self.rng.gauss(0.0, self.mutation_sigma)
                genes[i] = min(self.gene_limit, max(-self.gene_limit, g))
        ind.fitness = None
        return ind

    def breed(self):
        offspring = self.population.elites(self.elitism_count)
        while len(offspring) < self.population_size:
            p1 = self.tournament_select()
            p2 = self.tournament_select()
            c1, c2 = self.crossover(p1, p2)
            offspring.append(self.mutate(c1))
            offspring.append(self.mutate(c2))
        self.population.replace(offspring[: self.population_size])

    def evolve(self):
        best = self.evaluate_population()
        record = {
            "best": self.population.get_best_fitness(),
            "average": self.population.get_average_fitness(),
            "worst": self.population.get_worst_fitness(),
        }
        self.breed()
        self.generation += 1
        record["generation"] = self.generation
        self.history.append(record)
        return best

    def run(self, generations=None, stop_event=None, on_generation=None):
        n = self.generations if generations is None else int(generations)
        for _ in range(n):
            if stop_event is not None and stop_event.is_set():
                break
            best = self.evolve()
            if on_generation is not None:
                on_generation(self.get_current_stats(), best)
        return self.best_individual

    def get_current_stats(self):
        last = self.history[-1] if self.history else {}
        return {
            "generation": self.generation,
            "best_fitness": last.get("best"),
            "avg_fitness": last.get("average"),
            "worst_fitness": last.get("worst"),
            "history": list(self.history),
        }

    def get_best_individual(self):
        best = self.population.get_best_individual()
        return best if best is not None else self.best_individual


def _fitness(ind):
    return ind.fitness if ind.fitness is not None else float("-inf")
