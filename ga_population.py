from ga_individual import Individual


def _rank_key(ind):
    # unscored individuals sort after every scored one
    if ind.fitness is None:
        return (1, 0.0)
    return (0, -ind.fitness)


class Population:
    def __init__(self, config, rng, individuals=None):
        self.config = config
        self.generation = 0
        if individuals is None:
            size = int(config["population_size"])
            init_range = float(config["init_range"])
            individuals = [Individual(rng=rng, init_range=init_range) for _ in range(size)]
        self.individuals = list(individuals)

    def __len__(self):
        return len(self.individuals)

    def __iter__(self):
        return iter(self.individuals)

    def sort(self):
        self.individuals.sort(key=_rank_key)

    def evaluate(self, env, seeds, only_unscored=False):
        for ind in self.individuals:
            if only_unscored and ind.fitness is not None:
                continue
            ind.evaluate(env, seeds)
        self.sort()

    def scored(self):
        return [ind for ind in self.individuals if ind.fitness is not None]

    def get_best_individual(self):
        scored = self.scored()
        if not scored:
            return None
        return max(scored, key=lambda ind: ind.fitness)

    def get_best_fitness(self):
        best = self.get_best_individual()
        return best.fitness if best is not None else None

    def get_average_fitness(self):
        scored = self.scored()
        if not scored:
            return None
        return sum(ind.fitness for ind in scored) / len(scored)

    def get_worst_fitness(self):
        scored = self.scored()
        if not scored:
            return None
        return min(ind.fitness for ind in scored)

    def elites(self, k):
        """Clones of the k fittest, genome and fitness both kept."""
        ranked = sorted(self.scored(), key=_rank_key)
        return [ind.clone() for ind in ranked[:k]]

    def replace(self, individuals):
        self.individuals = list(individuals)
        self.generation += 1
