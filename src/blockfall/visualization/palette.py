from __future__ import annotations

from typing import Tuple

Color = Tuple[int, int, int]

BACKGROUND: Color = (11, 11, 16)
FIELD: Color = (17, 17, 26)
GRID_LINE: Color = (32, 32, 44)
TEXT: Color = (235, 235, 240)
DIM_TEXT: Color = (165, 165, 175)

PALETTE = {
    0: (20, 20, 26),
    1: (77, 215, 255),   # I
    2: (255, 216, 77),   # O
    3: (184, 107, 255),  # T
    4: (98, 240, 107),   # S
    5: (255, 90, 90),    # Z
    6: (77, 116, 255),   # J
    7: (255, 154, 77),   # L
}


def color_for_value(v: int) -> Color:
    # Negative values mark the falling piece in observations
    return PALETTE.get(abs(v), (200, 200, 200))
