"""Frame-time driven timers: gravity and horizontal auto-shift.

Nothing here reads a clock. Callers feed elapsed milliseconds per frame and
pass in the move to perform, so the same delta stream always produces the
same sequence of moves.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable


@dataclass
class GravityTimer:
    elapsed_ms: float = 0.0

    def reset(self) -> None:
        self.elapsed_ms = 0.0

    def update(self, dt_ms: float, interval_ms: float, fall: Callable[[], bool]) -> bool:
        """Advance by `dt_ms`, calling `fall` once per elapsed interval.

        Returns True as soon as a fall fails, meaning the piece has landed and
        must lock. The accumulator is cleared then, so a frame locks at most once.
        """
        if interval_ms <= 0:
            raise ValueError(f"gravity interval must be positive, got {interval_ms}")
        self.elapsed_ms += dt_ms
        while self.elapsed_ms >= interval_ms:
            self.elapsed_ms -= interval_ms
            if not fall():
                self.elapsed_ms = 0.0
                return True
        return False


@dataclass
class DirectionRepeat:
    """DAS/ARR state for a single direction."""

    das_ms: float
    arr_ms: float
    held: bool = False
    das_elapsed: float = 0.0
    arr_elapsed: float = 0.0

    def reset(self) -> None:
        self.held = False
        self.das_elapsed = 0.0
        self.arr_elapsed = 0.0

    def update(self, dt_ms: float, pressed: bool, move: Callable[[], bool]) -> int:
        """Returns how many moves succeeded this frame."""
        if not pressed:
            self.reset()
            return 0
        if not self.held:
            # Initial press moves immediately, the delay starts counting next frame.
            self.held = True
            self.das_elapsed = 0.0
            self.arr_elapsed = 0.0
            return 1 if move() else 0
        self.das_elapsed += dt_ms
        if self.das_elapsed < self.das_ms:
            return 0
        self.arr_elapsed += dt_ms
        moved = 0
        while self.arr_elapsed >= self.arr_ms:
            if not move():
                break
            self.arr_elapsed -= self.arr_ms
            moved += 1
        return moved


class HorizontalRepeat:
    def __init__(self, das_ms: float, arr_ms: float) -> None:
        self.left = DirectionRepeat(das_ms, arr_ms)
        self.right = DirectionRepeat(das_ms, arr_ms)

    def reset(self) -> None:
        self.left.reset()
        self.right.reset()

    def update(self, dt_ms: float, left: bool, right: bool, move: Callable[[int], bool]) -> int:
        """Returns the net column shift applied this frame."""
        if left and right:
            # Opposing inputs cancel and restart both delays.
            self.reset()
            return 0
        shifted = -self.left.update(dt_ms, left, lambda: move(-1))
        shifted += self.right.update(dt_ms, right, lambda: move(1))
        return shifted
