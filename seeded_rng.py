import math


class LCGRandom:
    """32-bit linear congruential generator.

    Mirrors the parts of ``random.Random`` the simulation and the GA use, so a
    run can be replayed bit for bit from its seed on any interpreter.
    """

    A = 1664525
    C = 1013904223
    M = 2 ** 32

    def __init__(self, seed=0):
        self.state = 0
        self.seed(seed)

    def seed(self, seed=0):
        self.state = int(seed or 0) % self.M

    def getstate(self):
        return self.state

    def setstate(self, state):
        self.state = int(state) % self.M

    def next_u32(self):
        self.state = (self.A * self.state + self.C) % self.M
        return self.state

    def random(self):
        return self.next_u32() / float(self.M)

    def uniform(self, a, b):
        return a + (b - a) * self.random()

    def randrange(self, n):
        if n <= 0:
            raise ValueError(f"empty range for randrange({n})")
        return min(n - 1, int(self.random() * n))

    def randint(self, a, b):
        return a + self.randrange(b - a + 1)

    def choice(self, seq):
        if not seq:
            raise IndexError("cannot choose from an empty sequence")
        return seq[self.randrange(len(seq))]

    def gauss(self, mu=0.0, sigma=1.0):
        # Box-Muller; u1 in (0, 1] keeps the log finite
        u1 = 1.0 - self.random()
        u2 = self.random()
        z = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
        return mu + sigma * z
