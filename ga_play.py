import argparse
import os
import threading

import pygame

from ga_eval import load_individual
from ga_individual import run_episode
from ga_train import BEST_PATH
from pac_config import CONFIG_PATH, load_config
from pac_env import PacEnv

BLACK = (10, 10, 15)
WHITE = (240, 240, 240)
YELLOW = (250, 215, 70)
WALL_COLOR = (40, 60, 200)
FRIGHT_COLOR = (60, 80, 230)
GHOST_COLORS = {
    "blinky": (220, 60, 60),
    "pinky": (255, 105, 180),
    "inky": (80, 220, 220),
    "clyde": (255, 165, 60),
}


def draw_env(screen, state, status_line=None):
    tile = state["tile"]
    width = state["grid_w"] * tile
    height = state["grid_h"] * tile
    screen.fill(BLACK)

    for y, row in enumerate(state["maze"]):
        for x, ch in enumerate(row):
            if ch == "#":
                pygame.draw.rect(screen, WALL_COLOR, pygame.Rect(x * tile, y * tile, tile, tile))

    for x, y in state["pellets"]:
        pygame.draw.circle(screen, WHITE, (x * tile + tile // 2, y * tile + tile // 2), 2)
    for x, y in state["power"]:
        pygame.draw.circle(screen, WHITE, (x * tile + tile // 2, y * tile + tile // 2), 6)

    p = state["player"]
    pygame.draw.circle(screen, YELLOW, (int(p["x"]), int(p["y"])), int(p["radius"]))

    for g in state["ghosts"]:
        color = FRIGHT_COLOR if g["vulnerable"] else GHOST_COLORS.get(g["kind"], WHITE)
        cx, cy, r = int(g["x"]), int(g["y"]), int(g["radius"])
        pygame.draw.circle(screen, color, (cx, cy), r)
        eye = max(2, tile // 8)
        pygame.draw.circle(screen, WHITE, (cx - r // 2, cy - r // 3), eye)
        pygame.draw.circle(screen, WHITE, (cx + r // 2, cy - r // 3), eye)

    font = pygame.font.SysFont("Arial", 18)
    hud = font.render(
        f"Score: {state['score']:06d}  Pellets: {state['pellets_eaten']}  Steps: {state['steps']}", True, WHITE
    )
    screen.blit(hud, (10, height - 22))

    if status_line:
        font = pygame.font.SysFont("Arial", 16)
        status = font.render(status_line, True, WHITE)
        screen.blit(status, (10, 4))

    if state["done"]:
        overlay = pygame.Surface((width, height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 180))
        screen.blit(overlay, (0, 0))
        msg = "CLEARED" if state["cleared"] else "GAME OVER" if state["is_dead"] else "OUT OF STEPS"
        big = pygame.font.SysFont("Arial", 64)
        text = big.render(msg, True, WHITE)
        screen.blit(text, (width // 2 - text.get_width() // 2, height // 2 - text.get_height() // 2))


def main():
    parser = argparse.ArgumentParser(description="Watch an exported policy play.")
    parser.add_argument("--individual", default=BEST_PATH)
    parser.add_argument("--config", default=CONFIG_PATH)
    parser.add_argument("--fps", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--episodes", type=int, default=0, help="0 = keep restarting until closed")
    args = parser.parse_args()

    os.environ.setdefault("SDL_VIDEO_WINDOW_POS", "60,60")
    cfg = load_config(args.config)
    cfg["render"] = True
    fps = args.fps if args.fps is not None else int(cfg["fps"])
    individual, data = load_individual(args.individual)
    env = PacEnv(cfg)

    pygame.init()
    screen = pygame.display.set_mode((env.width_px, env.height_px))
    pygame.display.set_caption("GA Pac-Man")
    clock = pygame.time.Clock()
    stop_event = threading.Event()
    episode = 1

    def render(state):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                stop_event.set()
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                stop_event.set()
        status = f"ep={episode} gen={data.get('generation', 0)} fitness={individual.fitness}"
        draw_env(screen, state, status_line=status)
        pygame.display.flip()
        clock.tick(fps)

    env.renderer = render
    seed = args.seed if args.seed is not None else int(cfg["seed"])
    while not stop_event.is_set():
        summary = run_episode(env, individual, seed=seed + episode - 1, stop_event=stop_event)
        print(
            f"Episode {episode} | score={summary['score']} pellets={summary['pellets_eaten']} "
            f"steps={summary['steps']} reward={summary['reward']:.1f}"
        )
        if args.episodes > 0 and episode >= args.episodes:
            break
        episode += 1

    pygame.quit()


if __name__ == "__main__":
    main()
