"""
Cross-cell cluster merging.

Clusters are built independently per grid cell, so a group of points
straddling a cell boundary ends up split into one cluster per side.
A single sweep over adjacent cells stitches those halves back together.
"""

import logging

from .spatial_index import PartitionGrid
from .types import Cluster


logger = logging.getLogger(__name__)


def merge_cell_pair(
    targets: list[Cluster],
    sources: list[Cluster],
    threshold: float,
) -> int:
    """
    Merge close clusters from one cell's list into another's.

    Every target is compared against every remaining source, in list
    order. A matched source is folded into the target and removed from
    its list, so it cannot be merged a second time.

    Args:
        targets: Cluster list of the current cell (updated in place)
        sources: Cluster list of the neighbor cell (updated in place)
        threshold: Merge threshold

    Returns:
        Number of source clusters merged away
    """
    merged = 0

    for t in range(len(targets)):
        s = 0
        while s < len(sources):
            combined = targets[t].combine_with(sources[s], threshold)
            if combined is None:
                s += 1
                continue

            targets[t] = combined
            del sources[s]
            merged += 1

    return merged


def merge_adjacent_cells(grid: PartitionGrid, threshold: float) -> int:
    """
    Run one merge sweep over the whole grid.

    Each cell, except those in the last row or last column, is merged
    with its right, upper and upper-right neighbors. The sweep is not
    repeated until nothing changes: a chain of clusters spanning three
    or more cells can stay partially split.

    Args:
        grid: Partition grid holding per-cell clusters
        threshold: Merge threshold

    Returns:
        Total number of clusters merged away
    """
    merged = 0

    for row in range(grid.rows - 1):
        for column in range(grid.columns - 1):
            targets = grid.cell(column, row)
            if not targets:
                continue

            for n_column, n_row in grid.merge_neighbors(column, row):
                sources = grid.cell(n_column, n_row)
                if sources:
                    merged += merge_cell_pair(targets, sources, threshold)

    logger.debug("Merged %d clusters across cell boundaries", merged)
    return merged
