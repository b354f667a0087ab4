from __future__ import annotations

import pytest

from blockfall.game import GameConfig, GameSession, Piece, TetrominoType


@pytest.fixture
def session() -> GameSession:
    return GameSession(GameConfig(random_seed=7))


@pytest.fixture
def free_session() -> GameSession:
    """Session without the per-frame delta clamp, for timing tests with long frames."""
    return GameSession(GameConfig(random_seed=7, max_frame_ms=None))


def place(game: GameSession, kind: TetrominoType, rotation: int = 0, x: int = 3, y: int = 0) -> Piece:
    game.active = Piece(kind=kind, rotation=rotation, x=x, y=y)
    return game.active
