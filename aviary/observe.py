"""
Neighbor observation over the spatial hash.

Two passes over all flyers, the second strictly after the first has
finished for every flyer:

1. assign_cells: each flyer records the cell of its current position
2. gather_observed: each flyer collects every id in the 3x3 block of cells
   around its own

Observed lists include the flyer's own id. Excluding self is left to each
consumer (see boids.py).
"""

from typing import Iterable, List

from .flyer import Flyer
from .spatial_hash import SpatialIndex


def assign_cells(flyers: Iterable[Flyer], index: SpatialIndex):
    """Pass 1: store the hashed cell on every flyer."""
    for flyer in flyers:
        flyer.cell = index.hash_position(flyer.position)


def gather_observed(flyers: Iterable[Flyer], index: SpatialIndex):
    """
    Pass 2: refill each flyer's observed list from neighboring cells.

    Requires assign_cells() to have completed for all flyers and the index
    to have been rebuilt this tick.
    """
    cells = index.cells
    for flyer in flyers:
        observed = flyer.observed
        observed.clear()
        for cell in index.neighbor_cells(flyer.cell):
            observed.extend(cells[cell])


def observe(flyers: List[Flyer], index: SpatialIndex):
    """
    Run both observation passes in order.

    Args:
        flyers: All tracked flyers (must be a re-iterable sequence)
        index: Spatial index already rebuilt from the same flyers
    """
    assign_cells(flyers, index)
    gather_observed(flyers, index)
