"""
Uniform spatial hash over the horizontal (x, z) plane.

Buckets flyer ids into fixed-size cells so that neighbor gathering only
visits the 3x3 block around a flyer's cell instead of every flyer.
Altitude (y) is ignored: a column of sky shares one cell.
"""

import math
from typing import Dict, Iterable, List, Tuple

import numpy as np

from .data_types import WorldBounds
from .flyer import Flyer


class SpatialIndex:
    """
    Fixed grid of cells_x * cells_z buckets of flyer ids.

    Rebuilt from scratch every tick (no incremental updates). Bucket lists
    are reused between rebuilds.

    Invariant after rebuild(): every flyer passed in appears in exactly one
    cell, and every cell index is in [0, cells_x * cells_z).
    """

    def __init__(self, bounds: WorldBounds):
        """
        Args:
            bounds: World bounds (cell size and grid dimensions)
        """
        self.cell_size: float = bounds.cell_size
        self.width: int = bounds.cells_x
        self.depth: int = bounds.cells_z
        self.cells: List[List[str]] = [[] for _ in range(self.width * self.depth)]

        # Build sequence counter (incremented on every rebuild)
        self._build_seq: int = 0

    @property
    def cell_count(self) -> int:
        return self.width * self.depth

    def hash_position(self, position: np.ndarray) -> int:
        """
        Map a world position to a cell index.

        Coordinates outside the grid are clamped to the border cells.
        Degenerate cell_size (<= 0) maps everything to cell 0.

        Args:
            position: [x, y, z] (y ignored)

        Returns:
            Cell index in [0, width * depth)
        """
        if self.cell_size <= 0:
            return 0

        x = _clamped_column(position[0], self.cell_size, self.width)
        z = _clamped_column(position[2], self.cell_size, self.depth)
        return x + z * self.width

    def cell_coords(self, cell: int) -> Tuple[int, int]:
        """(x, z) grid coordinates of a cell index"""
        return cell % self.width, cell // self.width

    def rebuild(self, flyers: Iterable[Flyer]):
        """
        Clear every cell and re-insert all flyers by current position.

        Args:
            flyers: All tracked flyers
        """
        for bucket in self.cells:
            bucket.clear()

        for flyer in flyers:
            self.cells[self.hash_position(flyer.position)].append(flyer.instance_id)

        self._build_seq += 1

    def neighbor_cells(self, cell: int) -> List[int]:
        """
        Cells of the 3x3 block centered on cell, clipped to the grid.

        Order is x-major, then z, both ascending. A corner cell yields 4
        cells, an edge cell 6, an interior cell 9.
        """
        x_me, z_me = self.cell_coords(cell)
        found = []
        for x in range(x_me - 1, x_me + 2):
            if x < 0 or x >= self.width:
                continue
            for z in range(z_me - 1, z_me + 2):
                if 0 <= z < self.depth:
                    found.append(x + z * self.width)
        return found

    def occupancy(self) -> Dict[int, int]:
        """
        Count of flyers per non-empty cell (diagnostics).

        Returns:
            Dict of {cell_index: flyer_count}
        """
        return {i: len(bucket) for i, bucket in enumerate(self.cells) if bucket}

    def indexed_count(self) -> int:
        """Total number of ids across all cells"""
        return sum(len(bucket) for bucket in self.cells)


def _clamped_column(coord: float, cell_size: float, count: int) -> int:
    if not math.isfinite(coord):
        return 0
    scaled = coord / cell_size
    if not math.isfinite(scaled):
        return count - 1 if scaled > 0 else 0
    column = math.floor(scaled)
    if column < 0:
        return 0
    if column > count - 1:
        return count - 1
    return column
