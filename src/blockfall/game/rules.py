from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScoringRules:
    line_clear_scores: tuple[int, int, int, int] = (100, 300, 500, 800)
    soft_drop_points: int = 1
    hard_drop_points: int = 2
    lines_per_level: int = 10
    # Gravity curve, milliseconds per row
    base_interval_ms: float = 800.0
    interval_step_ms: float = 60.0
    min_interval_ms: float = 120.0
    soft_drop_factor: float = 0.08
    soft_drop_min_ms: float = 35.0

    def __post_init__(self) -> None:
        if self.lines_per_level <= 0:
            raise ValueError("lines_per_level must be positive")
        if not 0 < self.min_interval_ms <= self.base_interval_ms:
            raise ValueError("need 0 < min_interval_ms <= base_interval_ms")
        if self.soft_drop_min_ms <= 0:
            raise ValueError("soft_drop_min_ms must be positive")

    def score_for_lines(self, lines: int, level: int = 1) -> int:
        if lines <= 0:
            return 0
        if 1 <= lines <= 4:
            base = self.line_clear_scores[lines - 1]
        else:
            # Exaggerate beyond 4 just in case of variants
            base = self.line_clear_scores[-1] + (lines - 4) * 400
        return base * level

    def level_for_lines(self, lines: int) -> int:
        return 1 + lines // self.lines_per_level

    def gravity_interval(self, level: int) -> float:
        interval = self.base_interval_ms - (level - 1) * self.interval_step_ms
        return max(self.min_interval_ms, min(self.base_interval_ms, interval))

    def soft_drop_interval(self, interval_ms: float) -> float:
        return max(self.soft_drop_min_ms, interval_ms * self.soft_drop_factor)


@dataclass
class SessionStats:
    score: int = 0
    lines: int = 0
    level: int = 1

    def add(self, points: int) -> None:
        if points < 0:
            raise ValueError(f"score can only increase, got {points}")
        self.score += points

    def record_clear(self, lines: int, rules: ScoringRules) -> int:
        """Apply one lock's line clears; returns the points awarded.

        The reward uses the level in effect before the clear.
        """
        if lines < 0:
            raise ValueError(f"negative line count {lines}")
        gained = rules.score_for_lines(lines, self.level)
        self.score += gained
        self.lines += lines
        self.level = rules.level_for_lines(self.lines)
        return gained
