from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterable, Optional, Tuple

import numpy as np

from .bag import BagRandomizer, PieceQueue
from .grid import GameGrid
from .pieces import ROTATION_OFFSETS, Piece, TetrominoType
from .rules import ScoringRules, SessionStats
from .timing import GravityTimer, HorizontalRepeat

logger = logging.getLogger(__name__)


class Action(IntEnum):
    NONE = 0
    MOVE_LEFT = 1
    MOVE_RIGHT = 2
    ROTATE_CW = 3
    ROTATE_CCW = 4
    SOFT_DROP = 5
    HARD_DROP = 6
    HOLD = 7
    TOGGLE_PAUSE = 8
    RESET = 9


class SessionState(Enum):
    PLAYING = "playing"
    PAUSED = "paused"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class HeldInput:
    """Continuously held controls for one frame."""

    left: bool = False
    right: bool = False
    soft_drop: bool = False


@dataclass
class GameConfig:
    width: int = 10
    visible_rows: int = 20
    hidden_rows: int = 2
    spawn_x: int = 3
    spawn_y: int = 0
    queue_length: int = 6
    preview_length: int = 5
    das_ms: float = 150.0
    arr_ms: float = 45.0
    # Longest frame fed to the timers; None disables the clamp
    max_frame_ms: Optional[float] = 33.0
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.width < 4 or self.visible_rows < 1 or self.hidden_rows < 0:
            raise ValueError(f"invalid board size {self.width}x{self.visible_rows}+{self.hidden_rows}")
        if not 0 <= self.spawn_x <= self.width - 4:
            raise ValueError(f"spawn_x {self.spawn_x} does not fit a {self.width}-wide board")
        if self.preview_length > self.queue_length:
            raise ValueError("preview_length cannot exceed queue_length")
        if self.das_ms < 0 or self.arr_ms < 0:
            raise ValueError("das_ms and arr_ms must be non-negative")
        if self.max_frame_ms is not None and self.max_frame_ms <= 0:
            raise ValueError("max_frame_ms must be positive")


@dataclass(frozen=True)
class PieceView:
    kind: TetrominoType
    rotation: int
    mask: np.ndarray
    x: int
    y: int


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only state handed to renderers after each frame.

    `board` holds only the visible rows; piece and ghost rows are in full-grid
    coordinates, subtract `hidden_rows` to get the visible row.
    """

    board: np.ndarray
    hidden_rows: int
    active: Optional[PieceView]
    ghost_y: Optional[int]
    hold: Optional[TetrominoType]
    can_hold: bool
    next_queue: Tuple[TetrominoType, ...]
    score: int
    lines: int
    level: int
    state: SessionState
    gravity_interval_ms: float


class GameSession:
    def __init__(self, config: Optional[GameConfig] = None, rules: Optional[ScoringRules] = None) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.rng = random.Random(self.config.random_seed)
        self.grid = GameGrid(self.config.width, self.config.visible_rows, self.config.hidden_rows)
        self.bag = BagRandomizer(self.rng)
        self.queue = PieceQueue(self.bag)
        self.stats = SessionStats()
        self.gravity = GravityTimer()
        self.shift = HorizontalRepeat(self.config.das_ms, self.config.arr_ms)
        self.state = SessionState.PLAYING
        self.active: Optional[Piece] = None
        self.hold_kind: Optional[TetrominoType] = None
        self.can_hold = True
        self.gravity_interval_ms = self.rules.gravity_interval(1)
        self.reset()

    # ------------------------------------------------------------------
    # Lifecycle

    def reset(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self.rng.seed(seed)
        self.grid = GameGrid(self.config.width, self.config.visible_rows, self.config.hidden_rows)
        self.bag = BagRandomizer(self.rng)
        self.queue = PieceQueue(self.bag)
        self.stats = SessionStats()
        self.gravity = GravityTimer()
        self.shift = HorizontalRepeat(self.config.das_ms, self.config.arr_ms)
        self.hold_kind = None
        self.can_hold = True
        self.gravity_interval_ms = self.rules.gravity_interval(self.stats.level)
        self.state = SessionState.PLAYING
        self.active = None
        self.bag.refill()
        self.queue.ensure(self.config.queue_length)
        self._spawn_next()
        logger.debug("session reset (seed=%s)", seed)

    def toggle_pause(self) -> None:
        if self.state is SessionState.PLAYING:
            self.state = SessionState.PAUSED
        elif self.state is SessionState.PAUSED:
            self.state = SessionState.PLAYING
        else:
            return
        logger.debug("session %s", self.state.value)

    @property
    def playing(self) -> bool:
        return self.state is SessionState.PLAYING and self.active is not None

    def advance(self, dt_ms: float, actions: Iterable[Action] = (), held: Optional[HeldInput] = None) -> GameSnapshot:
        """Run one frame: one-shot actions first, then auto-shift and gravity."""
        if dt_ms < 0:
            raise ValueError(f"frame delta must be non-negative, got {dt_ms}")
        if self.config.max_frame_ms is not None:
            dt_ms = min(dt_ms, self.config.max_frame_ms)
        held = held or HeldInput()

        for action in actions:
            self.apply(action)

        if self.playing:
            self.shift.update(dt_ms, held.left, held.right, lambda dx: self.try_move(dx, 0))

        if self.playing:
            interval = self.gravity_interval_ms
            if held.soft_drop:
                interval = self.rules.soft_drop_interval(interval)
            landed = self.gravity.update(dt_ms, interval, lambda: self._gravity_fall(held.soft_drop))
            if landed:
                self._lock_active()

        return self.snapshot()

    def apply(self, action: Action) -> None:
        if action == Action.RESET:
            self.reset()
        elif action == Action.TOGGLE_PAUSE:
            self.toggle_pause()
        elif not self.playing:
            return
        elif action == Action.MOVE_LEFT:
            self.try_move(-1, 0)
        elif action == Action.MOVE_RIGHT:
            self.try_move(1, 0)
        elif action == Action.ROTATE_CW:
            self.rotate(1)
        elif action == Action.ROTATE_CCW:
            self.rotate(-1)
        elif action == Action.SOFT_DROP:
            self.soft_drop()
        elif action == Action.HARD_DROP:
            self.hard_drop()
        elif action == Action.HOLD:
            self.hold()
        elif action == Action.NONE:
            pass
        else:
            raise ValueError(f"unknown action {action!r}")

    # ------------------------------------------------------------------
    # Piece control

    def try_move(self, dx: int, dy: int) -> bool:
        if not self.playing:
            return False
        assert self.active is not None
        if self.grid.collides(self.active, dx, dy):
            return False
        self.active = self.active.moved(dx, dy)
        return True

    def rotate(self, direction: int) -> bool:
        if direction not in (1, -1):
            raise ValueError(f"rotation direction must be +1 or -1, got {direction}")
        if not self.playing:
            return False
        assert self.active is not None
        turned = self.active.rotated(direction)
        for kx, ky in ROTATION_OFFSETS:
            if not self.grid.collides(self.active, kx, ky, turned.rotation):
                self.active = turned.moved(kx, ky)
                return True
        return False

    def hard_drop(self) -> int:
        if not self.playing:
            return 0
        assert self.active is not None
        distance = self.grid.landing_y(self.active) - self.active.y
        self.active = self.active.moved(0, distance)
        self.stats.add(distance * self.rules.hard_drop_points)
        self._lock_active()
        return distance

    def soft_drop(self) -> bool:
        if not self.playing:
            return False
        if self.try_move(0, 1):
            self.stats.add(self.rules.soft_drop_points)
            return True
        self._lock_active()
        return False

    def hold(self) -> bool:
        if not self.playing or not self.can_hold:
            return False
        assert self.active is not None
        current = self.active.kind
        self.can_hold = False
        if self.hold_kind is None:
            self.hold_kind = current
            self._spawn(self.queue.pop())
            self.queue.ensure(self.config.queue_length)
        else:
            swap, self.hold_kind = self.hold_kind, current
            self._spawn(swap)
        return True

    def ghost_row(self) -> Optional[int]:
        if self.active is None:
            return None
        return self.grid.landing_y(self.active)

    # ------------------------------------------------------------------
    # Internals

    def _gravity_fall(self, soft_drop_held: bool) -> bool:
        if not self.try_move(0, 1):
            return False
        if soft_drop_held:
            self.stats.add(self.rules.soft_drop_points)
        return True

    def _spawn(self, kind: TetrominoType) -> bool:
        piece = Piece(kind=kind, rotation=0, x=self.config.spawn_x, y=self.config.spawn_y)
        if self.grid.collides(piece):
            self.active = None
            self.state = SessionState.GAME_OVER
            logger.debug("game over: %s cannot spawn (score=%d lines=%d)", kind.name, self.stats.score, self.stats.lines)
            return False
        self.active = piece
        return True

    def _spawn_next(self) -> bool:
        kind = self.queue.pop()
        self.queue.ensure(self.config.queue_length)
        self.can_hold = True
        return self._spawn(kind)

    def _lock_active(self) -> int:
        assert self.active is not None, "lock without an active piece"
        self.grid.lock(self.active)
        self.active = None
        lines = self.grid.clear_lines()
        level_before = self.stats.level
        self.stats.record_clear(lines, self.rules)
        if self.stats.level != level_before:
            self.gravity_interval_ms = self.rules.gravity_interval(self.stats.level)
        self._spawn_next()
        return lines

    # ------------------------------------------------------------------
    # Views

    def snapshot(self) -> GameSnapshot:
        board = self.grid.visible().copy()
        board.setflags(write=False)
        active = None
        if self.active is not None:
            active = PieceView(
                kind=self.active.kind,
                rotation=self.active.rotation,
                mask=self.active.shape(),
                x=self.active.x,
                y=self.active.y,
            )
        return GameSnapshot(
            board=board,
            hidden_rows=self.grid.hidden_rows,
            active=active,
            ghost_y=self.ghost_row(),
            hold=self.hold_kind,
            can_hold=self.can_hold,
            next_queue=self.queue.peek(self.config.preview_length),
            score=self.stats.score,
            lines=self.stats.lines,
            level=self.stats.level,
            state=self.state,
            gravity_interval_ms=self.gravity_interval_ms,
        )

    def get_state(self) -> np.ndarray:
        # Overlay current piece on a copy of the visible grid for observation
        state = self.grid.clone_state()
        if self.active is not None:
            for x, y in self.active.cells():
                if self.grid.is_inside(x, y):
                    # Use negative to indicate falling piece overlay
                    state[y, x] = -int(self.active.kind)
        return state[self.grid.hidden_rows :]
