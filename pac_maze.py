import numpy as np

from pac_config import ConfigError


BASE_MAZE = [
    "############################",
    "#o...........##...........o#",
    "#.####.#####.##.#####.####.#",
    "#.####.#####.##.#####.####.#",
    "#.####.#####.##.#####.####.#",
    "#..........................#",
    "#.####.##.########.##.####.#",
    "#.####.##.########.##.####.#",
    "#......##....##....##......#",
    "######.#####.##.#####.######",
    "######.#####.##.#####.######",
    "######.##....G.....##.######",
    "######.##.###..###.##.######",
    "######.##.#..GG..#.##.######",
    "..........#..G...#..........",
    "######.##.#......#.##.######",
    "######.##.########.##.######",
    "######.##..........##.######",
    "######.##.########.##.######",
    "######.##.########.##.######",
    "#............##............#",
    "#.####.#####.##.#####.####.#",
    "#.####.#####.##.#####.####.#",
    "#...##.......P........##...#",
    "###.##.##.########.##.##.###",
    "###.##.##.########.##.##.###",
    "#......##....##....##......#",
    "#.##########.##.##########.#",
    "#.##########.##.##########.#",
    "#o........................o#",
    "############################",
]

# (row_min, row_max, col_min, col_max), inclusive
BASE_SPAWN_ZONE = (13, 15, 10, 16)

UP = (0, -1)
DOWN = (0, 1)
LEFT = (-1, 0)
RIGHT = (1, 0)
NO_MOVE = (0, 0)
MOVE_DIRS = [UP, DOWN, LEFT, RIGHT]

WALL = "#"
OPEN_CHARS = ". oPG"
PELLET_CHARS = ".PG"
POWER_CHARS = "o"


class Maze:
    """Static grid of walls plus the spawn and pellet layout it was drawn with."""

    def __init__(self, rows=None, spawn_zone=None):
        if rows is None:
            rows = BASE_MAZE
            if spawn_zone is None:
                spawn_zone = BASE_SPAWN_ZONE
        self.rows = tuple(rows)
        self.spawn_zone = tuple(spawn_zone) if spawn_zone is not None else None
        self._parse()

    def _parse(self):
        if not self.rows:
            raise ConfigError("maze has no rows")
        self.height = len(self.rows)
        self.width = len(self.rows[0])
        if self.width == 0 or any(len(r) != self.width for r in self.rows):
            raise ConfigError("maze rows must be non-empty and of equal length")

        walls = np.zeros((self.height, self.width), dtype=bool)
        pellets = np.zeros_like(walls)
        power = np.zeros_like(walls)
        player_start = None
        ghost_starts = []
        for y, row in enumerate(self.rows):
            for x, ch in enumerate(row):
                if ch == WALL:
                    walls[y, x] = True
                elif ch not in OPEN_CHARS:
                    raise ConfigError(f"unknown maze cell {ch!r} at row {y}, col {x}")
                if ch in PELLET_CHARS:
                    pellets[y, x] = True
                elif ch in POWER_CHARS:
                    power[y, x] = True
                if ch == "P":
                    if player_start is not None:
                        raise ConfigError("maze has more than one player start")
                    player_start = (x, y)
                elif ch == "G":
                    ghost_starts.append((x, y))
        if player_start is None:
            raise ConfigError("maze has no player start 'P'")

        if not walls[0].all() or not walls[-1].all():
            raise ConfigError("top and bottom maze rows must be walls")
        tunnels = []
        for y in range(self.height):
            left, right = walls[y, 0], walls[y, -1]
            if left and right:
                continue
            if left or right:
                raise ConfigError(f"row {y} opens on only one side")
            tunnels.append(y)

        for arr in (walls, pellets, power):
            arr.flags.writeable = False
        self.walls = walls
        self.pellets = pellets
        self.power = power
        self.player_start = player_start
        self.ghost_starts = ghost_starts
        self.tunnel_rows = frozenset(tunnels)
        self._corners = self._find_corners()

    def in_bounds(self, row, col):
        return 0 <= row < self.height and 0 <= col < self.width

    def is_wall(self, row, col):
        if not self.in_bounds(row, col):
            return True
        return bool(self.walls[row, col])

    def is_tunnel_row(self, row):
        return row in self.tunnel_rows

    def in_spawn_zone(self, row, col):
        if self.spawn_zone is None:
            return False
        r0, r1, c0, c1 = self.spawn_zone
        return r0 <= row <= r1 and c0 <= col <= c1

    def width_px(self, tile):
        return self.width * tile

    def height_px(self, tile):
        return self.height * tile

    def corners(self):
        """(col, row) of the four outermost open cells, for corner-seeking ghosts."""
        return list(self._corners)

    def _find_corners(self):
        open_cells = np.argwhere(~self.walls)
        out = []
        for sy, sx in ((1, 1), (1, -1), (-1, 1), (-1, -1)):
            key = open_cells[:, 0] * sy + open_cells[:, 1] * sx
            y, x = open_cells[int(np.argmin(key))]
            out.append((int(x), int(y)))
        return tuple(out)


class PelletField:
    def __init__(self, maze):
        self.maze = maze
        self.total = int(maze.pellets.sum() + maze.power.sum())
        self.reset()

    def reset(self):
        self.pellets = self.maze.pellets.copy()
        self.power = self.maze.power.copy()

    def remaining(self):
        return int(self.pellets.sum() + self.power.sum())

    def has_pellet(self, row, col):
        if not self.maze.in_bounds(row, col):
            return False
        return bool(self.pellets[row, col] or self.power[row, col])

    def consume(self, row, col):
        """Clear the cell and return "pellet", "power_pellet" or None."""
        if not self.maze.in_bounds(row, col):
            return None
        if self.pellets[row, col]:
            self.pellets[row, col] = False
            return "pellet"
        if self.power[row, col]:
            self.power[row, col] = False
            return "power_pellet"
        return None

    def occupied(self):
        return np.argwhere(self.pellets | self.power)

    def copy_grids(self):
        return self.pellets.copy(), self.power.copy()
