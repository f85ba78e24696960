import math

from pac_maze import DOWN, LEFT, NO_MOVE, RIGHT, UP


BLINKY = "blinky"
PINKY = "pinky"
INKY = "inky"
CLYDE = "clyde"
GHOST_KINDS = [BLINKY, PINKY, INKY, CLYDE]

SPAWN_EXIT = "spawn_exit"
CHASE = "chase"
FLEE = "flee"

GHOST_DIRS = [RIGHT, LEFT, DOWN, UP]


def _sign(v):
    if v > 0:
        return 1
    if v < 0:
        return -1
    return 0


def _heading(d, vx, vy):
    return d[0] * vx + d[1] * vy


class Agent:
    """Circle moving through the maze in pixel space, centred on (x, y)."""

    def __init__(self, col, row, tile, speed):
        self.start = (col, row)
        self.tile = tile
        self.radius = tile * 0.4
        self.margin = tile * 0.1
        self.speed = speed
        self.dir = NO_MOVE
        self.place_at_start()

    def place_at_start(self):
        col, row = self.start
        self.x = col * self.tile + self.tile / 2
        self.y = row * self.tile + self.tile / 2

    def grid_pos(self):
        return int(self.x // self.tile), int(self.y // self.tile)

    def can_move(self, maze, d):
        nx = self.x + d[0] * self.speed
        ny = self.y + d[1] * self.speed
        reach = self.radius - self.margin
        col1 = math.floor((nx - reach) / self.tile)
        col2 = math.floor((nx + reach) / self.tile)
        row1 = math.floor((ny - reach) / self.tile)
        row2 = math.floor((ny + reach) / self.tile)

        if row1 < 0 or row2 >= maze.height:
            return False
        if col1 < 0 or col2 >= maze.width:
            # off-grid only along a tunnel, never turning out of it
            return d[1] == 0 and row1 == row2 and maze.is_tunnel_row(row1)
        for row in (row1, row2):
            for col in (col1, col2):
                if maze.is_wall(row, col):
                    return False
        return True

    def move(self, d):
        self.x += d[0] * self.speed
        self.y += d[1] * self.speed

    def wrap(self, maze):
        width = maze.width_px(self.tile)
        if self.x < 0:
            self.x = width
        elif self.x > width:
            self.x = 0

    def distance_to(self, other):
        return math.hypot(self.x - other.x, self.y - other.y)

    def touches(self, other):
        return self.distance_to(other) < self.radius + other.radius


class Player(Agent):
    def __init__(self, col, row, tile, speed):
        super().__init__(col, row, tile, speed)
        self.next_dir = NO_MOVE

    def reset(self):
        self.place_at_start()
        self.dir = NO_MOVE
        self.next_dir = NO_MOVE

    def set_direction(self, d):
        self.next_dir = d

    def update(self, maze):
        """Advance one tick; a blocked player stays put and keeps its pending turn."""
        if self.next_dir != NO_MOVE and self.can_move(maze, self.next_dir):
            self.dir = self.next_dir
            self.next_dir = NO_MOVE

        if self.dir != NO_MOVE and self.can_move(maze, self.dir):
            self.move(self.dir)
            self.wrap(maze)
            return True
        return False


# Chase scorers: bias toward the player, one per archetype.

def _blinky_chase(ghost, d, player, maze, rng):
    dx, dy = player.x - ghost.x, player.y - ghost.y
    score = 25.0 if _heading(d, dx, dy) > 0 else 0.0
    if math.hypot(dx, dy) < 7.5 * ghost.tile:
        score += 15.0
    return score


def _pinky_chase(ghost, d, player, maze, rng):
    ahead = 4 * ghost.tile
    tx = player.x + player.dir[0] * ahead
    ty = player.y + player.dir[1] * ahead
    return 20.0 if _heading(d, tx - ghost.x, ty - ghost.y) > 0 else 0.0


def _inky_chase(ghost, d, player, maze, rng):
    toward = _heading(d, player.x - ghost.x, player.y - ghost.y) > 0
    score = 15.0 if toward else 0.0
    score += rng.random() * 10.0
    if rng.random() < 0.3 and toward:
        score += 10.0
    return score


def _clyde_chase(ghost, d, player, maze, rng):
    dx, dy = player.x - ghost.x, player.y - ghost.y
    if math.hypot(dx, dy) < 6 * ghost.tile:
        return 20.0 if _heading(d, -dx, -dy) > 0 else 0.0
    return 18.0 if _heading(d, dx, dy) > 0 else 0.0


# Flee scorers: bias away from the player, each with its own noise or cornering.

def _axis_matches(d, ax, ay):
    return int(_sign(d[0]) == _sign(ax)) + int(_sign(d[1]) == _sign(ay))


def _blinky_flee(ghost, d, player, maze, rng):
    score = 12.0 * _axis_matches(d, ghost.x - player.x, ghost.y - player.y)
    return score + rng.random() * 8.0


def _pinky_flee(ghost, d, player, maze, rng):
    score = 10.0 * _axis_matches(d, ghost.x - player.x, ghost.y - player.y)
    cx, cy = ghost.nearest_corner(maze)
    if _heading(d, cx - ghost.x, cy - ghost.y) > 0:
        score += 5.0
    return score


def _inky_flee(ghost, d, player, maze, rng):
    score = rng.random() * 15.0
    return score + 8.0 * _axis_matches(d, ghost.x - player.x, ghost.y - player.y)


def _clyde_flee(ghost, d, player, maze, rng):
    return 15.0 * _axis_matches(d, ghost.x - player.x, ghost.y - player.y)


CHASE_SCORERS = {
    BLINKY: _blinky_chase,
    PINKY: _pinky_chase,
    INKY: _inky_chase,
    CLYDE: _clyde_chase,
}

FLEE_SCORERS = {
    BLINKY: _blinky_flee,
    PINKY: _pinky_flee,
    INKY: _inky_flee,
    CLYDE: _clyde_flee,
}

CHASE_CONTINUITY = 8.0
CHASE_REVERSE = -5.0
FLEE_CONTINUITY = 6.0


class Ghost(Agent):
    def __init__(self, kind, col, row, tile, speed, config):
        super().__init__(col, row, tile, speed)
        self.kind = kind
        self.chase_interval = int(config["ghost_chase_interval"])
        self.chase_prob = float(config["ghost_chase_prob"])
        self.flee_interval = int(config["ghost_flee_interval"])
        self.flee_prob = float(config["ghost_flee_prob"])
        self.mode = CHASE
        self.vulnerable = False
        self.vulnerable_timer = 0
        self.decision_timer = 0

    def in_spawn_zone(self, maze):
        col, row = self.grid_pos()
        return maze.in_spawn_zone(row, col)

    def reset(self, maze, rng):
        self.place_at_start()
        self.vulnerable = False
        self.vulnerable_timer = 0
        self.decision_timer = 0
        if self.in_spawn_zone(maze):
            self.mode = SPAWN_EXIT
            self.dir = UP
        else:
            self.mode = CHASE
            self.dir = self.random_direction(maze, rng)

    def make_vulnerable(self, ticks):
        self.vulnerable = ticks > 0
        self.vulnerable_timer = ticks
        if self.vulnerable and self.mode == CHASE:
            self.mode = FLEE

    def tick_vulnerability(self):
        if not self.vulnerable:
            return
        self.vulnerable_timer -= 1
        if self.vulnerable_timer <= 0:
            self.vulnerable = False
            self.vulnerable_timer = 0
            if self.mode == FLEE:
                self.mode = CHASE

    def nearest_corner(self, maze):
        best = None
        for col, row in maze.corners():
            cx = col * self.tile + self.tile / 2
            cy = row * self.tile + self.tile / 2
            dist = math.hypot(cx - self.x, cy - self.y)
            if best is None or dist < best[0]:
                best = (dist, cx, cy)
        return best[1], best[2]

    def open_directions(self, maze):
        return [d for d in GHOST_DIRS if self.can_move(maze, d)]

    def random_direction(self, maze, rng):
        options = self.open_directions(maze)
        if not options:
            return self.dir
        return rng.choice(options)

    def choose_direction(self, maze, player, rng):
        options = self.open_directions(maze)
        if not options:
            return self.dir
        fleeing = self.mode == FLEE
        scorer = (FLEE_SCORERS if fleeing else CHASE_SCORERS)[self.kind]
        reverse = (-self.dir[0], -self.dir[1])

        scored = []
        for d in options:
            score = scorer(self, d, player, maze, rng)
            if d == self.dir:
                score += FLEE_CONTINUITY if fleeing else CHASE_CONTINUITY
            elif not fleeing and d == reverse and self.dir != NO_MOVE:
                score += CHASE_REVERSE
            scored.append((score, d))

        best = max(s for s, _ in scored)
        tied = [d for s, d in scored if s == best]
        if len(tied) == 1:
            return tied[0]
        return rng.choice(tied)

    def _leave_spawn_if_out(self, maze):
        if not self.in_spawn_zone(maze):
            self.mode = FLEE if self.vulnerable else CHASE

    def update(self, maze, player, rng):
        self.decision_timer += 1

        if self.mode == SPAWN_EXIT:
            self._leave_spawn_if_out(maze)
        if self.mode == SPAWN_EXIT:
            if self.can_move(maze, UP):
                self.dir = UP
            if self.can_move(maze, self.dir):
                self.move(self.dir)
                self.wrap(maze)
            self._leave_spawn_if_out(maze)
            return

        if self.mode == FLEE:
            if self.decision_timer > self.flee_interval and rng.random() < self.flee_prob:
                self.dir = self.choose_direction(maze, player, rng)
                self.decision_timer = 0
        elif self.decision_timer > self.chase_interval:
            if rng.random() < self.chase_prob:
                self.dir = self.choose_direction(maze, player, rng)
            else:
                self.dir = self.random_direction(maze, rng)
            self.decision_timer = 0

        if self.dir != NO_MOVE and self.can_move(maze, self.dir):
            self.move(self.dir)
            self.wrap(maze)
        else:
            # blocked: re-score now, move again next tick
            self.dir = self.choose_direction(maze, player, rng)
            self.decision_timer = 0
