from __future__ import annotations

import random
from collections import deque
from typing import Deque, List, Optional, Sequence, Tuple

from .pieces import TetrominoType


class BagRandomizer:
    """7-bag randomizer.

    Hands out every piece type exactly once per bag, in a uniformly shuffled
    order, then reshuffles. A type can therefore appear at most twice in any
    run of seven draws (end of one bag, start of the next).
    """

    def __init__(self, rng: Optional[random.Random] = None, kinds: Sequence[TetrominoType] = tuple(TetrominoType)) -> None:
        if not kinds:
            raise ValueError("bag needs at least one piece type")
        self.rng = rng or random.Random()
        self.kinds: Tuple[TetrominoType, ...] = tuple(kinds)
        self.bag: List[TetrominoType] = []

    def refill(self) -> None:
        self.bag = list(self.kinds)
        self.rng.shuffle(self.bag)

    def draw(self) -> TetrominoType:
        if not self.bag:
            self.refill()
        return self.bag.pop()

    def __len__(self) -> int:
        return len(self.bag)


class PieceQueue:
    """Upcoming piece types, topped up from a bag on demand."""

    def __init__(self, bag: BagRandomizer) -> None:
        self.bag = bag
        self._items: Deque[TetrominoType] = deque()

    def ensure(self, min_length: int) -> None:
        while len(self._items) < min_length:
            self._items.append(self.bag.draw())

    def pop(self) -> TetrominoType:
        if not self._items:
            self._items.append(self.bag.draw())
        return self._items.popleft()

    def peek(self, n: int) -> Tuple[TetrominoType, ...]:
        return tuple(list(self._items)[:n])

    def __len__(self) -> int:
        return len(self._items)
