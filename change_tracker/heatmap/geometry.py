from __future__ import annotations

import math
from typing import Final

from change_tracker.heatmap.domain.models import GridGeometry


BASE_CELL_SIZE: Final[int] = 16
CELL_PADDING_RATIO: Final[float] = 0.125
Y_AXIS_WIDTH_RATIO: Final[float] = 2.5
X_AXIS_HEIGHT_RATIO: Final[float] = 1.875
MIN_CELL_SIZE: Final[int] = 12
MAX_CELL_SIZE: Final[int] = 24
OUTER_PADDING: Final[int] = 40
MARGIN_X: Final[int] = 20
MARGIN_Y: Final[int] = 40
FONT_RATIO: Final[float] = 0.6875
MIN_FONT_SIZE: Final[int] = 10
DAYS_PER_WEEK: Final[int] = 7


def compute_geometry(container_width_px: float, week_count: int) -> GridGeometry:
    """Size the grid so ``week_count`` columns fit the container width.

    Cell size is clamped to [12, 24] px; everything else scales from it.
    A NaN width yields the minimum cell size.
    """
    weeks = max(1, int(week_count))

    available_width = container_width_px - OUTER_PADDING
    axis_width = BASE_CELL_SIZE * Y_AXIS_WIDTH_RATIO
    grid_budget = available_width - axis_width

    fitted = grid_budget / (weeks + (weeks - 1) * CELL_PADDING_RATIO)
    if math.isnan(fitted):
        fitted = MIN_CELL_SIZE
    # Clamp before flooring so an infinite width still lands on the cap.
    cell_size = math.floor(max(MIN_CELL_SIZE, min(fitted, MAX_CELL_SIZE)))

    cell_padding = cell_size * CELL_PADDING_RATIO
    axis_w = cell_size * Y_AXIS_WIDTH_RATIO
    axis_h = cell_size * X_AXIS_HEIGHT_RATIO

    grid_width = weeks * (cell_size + cell_padding) - cell_padding
    grid_height = DAYS_PER_WEEK * (cell_size + cell_padding) - cell_padding

    return GridGeometry(
        cell_size_px=int(cell_size),
        cell_padding_px=cell_padding,
        axis_label_width_px=axis_w,
        axis_label_height_px=axis_h,
        total_width_px=grid_width + axis_w + MARGIN_X,
        total_height_px=grid_height + axis_h + MARGIN_Y,
        font_size_px=max(MIN_FONT_SIZE, cell_size * FONT_RATIO),
    )
