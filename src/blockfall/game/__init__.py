"""Game module for Blockfall.

Exports the core game engine and supporting classes:
- GameGrid: Grid representation, collision checks and line clearing
- Piece: Active tetromino (type, rotation, position)
- TetrominoType: Enum of available piece types
- BagRandomizer / PieceQueue: 7-bag piece source and next queue
- ScoringRules / SessionStats: Scoring, level and gravity curves
- GravityTimer / HorizontalRepeat: Frame-time driven gravity and DAS/ARR
- GameSession: Session state machine, snapshots and the per-frame entry point
"""

from .bag import BagRandomizer, PieceQueue
from .grid import GameGrid
from .pieces import ROTATION_OFFSETS, ROTATIONS, Piece, TetrominoType, rotation_count, shape_for
from .rules import ScoringRules, SessionStats
from .timing import DirectionRepeat, GravityTimer, HorizontalRepeat
from .core import (
    Action,
    GameConfig,
    GameSession,
    GameSnapshot,
    HeldInput,
    PieceView,
    SessionState,
)

__all__ = [
    "GameGrid",
    "Piece",
    "TetrominoType",
    "ROTATIONS",
    "ROTATION_OFFSETS",
    "rotation_count",
    "shape_for",
    "BagRandomizer",
    "PieceQueue",
    "ScoringRules",
    "SessionStats",
    "GravityTimer",
    "DirectionRepeat",
    "HorizontalRepeat",
    "GameSession",
    "GameConfig",
    "GameSnapshot",
    "HeldInput",
    "PieceView",
    "SessionState",
    "Action",
]
