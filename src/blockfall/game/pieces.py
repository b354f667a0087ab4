from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from types import MappingProxyType
from typing import List, Mapping, Optional, Sequence, Tuple

import numpy as np


class TetrominoType(IntEnum):
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7


Shape = np.ndarray

MASK_SIZE = 4

# Corrections tried in order when a rotation collides; shared by every piece type.
ROTATION_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (0, 0),
    (-1, 0),
    (1, 0),
    (-2, 0),
    (2, 0),
    (0, -1),
)


def _freeze(states: Sequence[Sequence[Sequence[int]]]) -> Tuple[Shape, ...]:
    frozen = []
    for rows in states:
        mask = np.array(rows, dtype=np.int8)
        assert mask.shape == (MASK_SIZE, MASK_SIZE)
        mask.setflags(write=False)
        frozen.append(mask)
    return tuple(frozen)


ROTATIONS: Mapping[TetrominoType, Tuple[Shape, ...]] = MappingProxyType({
    TetrominoType.I: _freeze([
        [[0, 0, 0, 0], [1, 1, 1, 1], [0, 0, 0, 0], [0, 0, 0, 0]],
        [[0, 0, 1, 0], [0, 0, 1, 0], [0, 0, 1, 0], [0, 0, 1, 0]],
    ]),
    TetrominoType.O: _freeze([
        [[0, 1, 1, 0], [0, 1, 1, 0], [0, 0, 0, 0], [0, 0, 0, 0]],
    ]),
    TetrominoType.T: _freeze([
        [[0, 1, 0, 0], [1, 1, 1, 0], [0, 0, 0, 0], [0, 0, 0, 0]],
        [[0, 1, 0, 0], [0, 1, 1, 0], [0, 1, 0, 0], [0, 0, 0, 0]],
        [[0, 0, 0, 0], [1, 1, 1, 0], [0, 1, 0, 0], [0, 0, 0, 0]],
        [[0, 1, 0, 0], [1, 1, 0, 0], [0, 1, 0, 0], [0, 0, 0, 0]],
    ]),
    TetrominoType.S: _freeze([
        [[0, 1, 1, 0], [1, 1, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]],
        [[0, 1, 0, 0], [0, 1, 1, 0], [0, 0, 1, 0], [0, 0, 0, 0]],
    ]),
    TetrominoType.Z: _freeze([
        [[1, 1, 0, 0], [0, 1, 1, 0], [0, 0, 0, 0], [0, 0, 0, 0]],
        [[0, 0, 1, 0], [0, 1, 1, 0], [0, 1, 0, 0], [0, 0, 0, 0]],
    ]),
    TetrominoType.J: _freeze([
        [[1, 0, 0, 0], [1, 1, 1, 0], [0, 0, 0, 0], [0, 0, 0, 0]],
        [[0, 1, 1, 0], [0, 1, 0, 0], [0, 1, 0, 0], [0, 0, 0, 0]],
        [[0, 0, 0, 0], [1, 1, 1, 0], [0, 0, 1, 0], [0, 0, 0, 0]],
        [[0, 1, 0, 0], [0, 1, 0, 0], [1, 1, 0, 0], [0, 0, 0, 0]],
    ]),
    TetrominoType.L: _freeze([
        [[0, 0, 1, 0], [1, 1, 1, 0], [0, 0, 0, 0], [0, 0, 0, 0]],
        [[0, 1, 0, 0], [0, 1, 0, 0], [0, 1, 1, 0], [0, 0, 0, 0]],
        [[0, 0, 0, 0], [1, 1, 1, 0], [1, 0, 0, 0], [0, 0, 0, 0]],
        [[1, 1, 0, 0], [0, 1, 0, 0], [0, 1, 0, 0], [0, 0, 0, 0]],
    ]),
})


def _states(kind: TetrominoType) -> Tuple[Shape, ...]:
    try:
        return ROTATIONS[kind]
    except KeyError:
        raise ValueError(f"no shape defined for piece type {kind!r}") from None


def rotation_count(kind: TetrominoType) -> int:
    return len(_states(kind))


def shape_for(kind: TetrominoType, rotation: int) -> Shape:
    """Return the read-only 4x4 mask for `kind` at `rotation`.

    Rotation indices are not wrapped here: an out-of-range index is a bug in
    the caller and raises ValueError.
    """
    states = _states(kind)
    if not 0 <= rotation < len(states):
        raise ValueError(f"rotation {rotation} out of range for {TetrominoType(kind).name} ({len(states)} states)")
    return states[rotation]


@dataclass(frozen=True)
class Piece:
    kind: TetrominoType
    rotation: int = 0
    x: int = 0
    y: int = 0

    def __post_init__(self) -> None:
        # Fails fast on unknown kinds and bad rotation indices.
        shape_for(self.kind, self.rotation)

    @property
    def rotation_count(self) -> int:
        return rotation_count(self.kind)

    def shape(self, rotation: Optional[int] = None) -> Shape:
        return shape_for(self.kind, self.rotation if rotation is None else rotation)

    def moved(self, dx: int, dy: int) -> "Piece":
        return replace(self, x=self.x + dx, y=self.y + dy)

    def rotated(self, direction: int) -> "Piece":
        count = self.rotation_count
        return replace(self, rotation=(self.rotation + direction + count) % count)

    def cells_at(self, origin_x: int, origin_y: int, rotation: Optional[int] = None) -> List[Tuple[int, int]]:
        s = self.shape(rotation)
        cells: List[Tuple[int, int]] = []
        for dy, dx in zip(*np.nonzero(s)):
            cells.append((origin_x + int(dx), origin_y + int(dy)))
        return cells

    def cells(self) -> List[Tuple[int, int]]:
        return self.cells_at(self.x, self.y)
