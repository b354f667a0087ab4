from __future__ import annotations

import argparse
from typing import Dict, List, Optional

import pygame

from blockfall.game import Action, GameConfig, GameSession, HeldInput
from .renderer import Renderer


KEY_TO_ACTION: Dict[int, Action] = {
    pygame.K_UP: Action.ROTATE_CW,
    pygame.K_w: Action.ROTATE_CW,
    pygame.K_x: Action.ROTATE_CW,
    pygame.K_z: Action.ROTATE_CCW,
    pygame.K_SPACE: Action.HARD_DROP,
    pygame.K_c: Action.HOLD,
    pygame.K_p: Action.TOGGLE_PAUSE,
    pygame.K_r: Action.RESET,
}

LEFT_KEYS = (pygame.K_LEFT, pygame.K_a)
RIGHT_KEYS = (pygame.K_RIGHT, pygame.K_d)
SOFT_DROP_KEYS = (pygame.K_DOWN, pygame.K_s)


def held_input(pressed) -> HeldInput:
    return HeldInput(
        left=any(pressed[k] for k in LEFT_KEYS),
        right=any(pressed[k] for k in RIGHT_KEYS),
        soft_drop=any(pressed[k] for k in SOFT_DROP_KEYS),
    )


def run(seed: Optional[int] = None, cell_size: int = 28) -> None:
    pygame.init()
    try:
        clock = pygame.time.Clock()
        game = GameSession(GameConfig(random_seed=seed))
        renderer = Renderer(cell_size=cell_size)

        screen = pygame.display.set_mode(renderer.window_size(game.snapshot()))
        pygame.display.set_caption("Blockfall")
        font = pygame.font.SysFont(None, 24)

        running = True
        while running:
            dt = clock.tick(60)
            actions: List[Action] = []
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    else:
                        action = KEY_TO_ACTION.get(event.key)
                        if action is not None:
                            actions.append(action)

            snapshot = game.advance(dt, actions, held_input(pygame.key.get_pressed()))
            renderer.draw(screen, snapshot, font)
            pygame.display.flip()
    finally:
        pygame.quit()


def main() -> None:
    p = argparse.ArgumentParser(description="Play Blockfall with the keyboard")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--cell_size", type=int, default=28)
    args = p.parse_args()
    run(seed=args.seed, cell_size=args.cell_size)


if __name__ == "__main__":  # pragma: no cover
    main()
