"""
Uniform grid partitioning of a world region.

Divides the region into square cells of a fixed partition size.
Each cell owns a list of clusters; clusters are only ever compared
against clusters in the same cell or in an adjacent cell.
"""

from typing import Iterator, Optional, Tuple
import math

from .config import WORLD_CELL_SIZE
from .types import Cluster, Vector, WorldRegion


# Neighbor offsets compared by the cross-cell merge, in sweep order.
# Only one quadrant is needed since every pair of adjacent cells is
# visited from its lower-left member.
MERGE_NEIGHBOR_OFFSETS: Tuple[Tuple[int, int], ...] = ((1, 0), (0, 1), (1, 1))


class PartitionGrid:
    """
    Pre-allocated grid of cluster lists covering a world region.

    Cells are stored in a flat list indexed by row * columns + column
    and are never resized after construction.
    """

    def __init__(self, region: WorldRegion, partition_size: float):
        """
        Initialize the grid for a region.

        Args:
            region: World boundary; positions outside it are rejected
            partition_size: Edge length of one grid cell in world units
        """
        self.region = region
        self.partition_size = partition_size

        self.columns = int(math.ceil(region.width / partition_size))
        self.rows = int(math.ceil(region.height / partition_size))

        self._cells: list[list[Cluster]] = [[] for _ in range(self.columns * self.rows)]

    def cell_coords(self, position: Vector) -> Tuple[int, int]:
        """Compute the (column, row) a position maps to, without bounds checks."""
        column = int(math.floor((position.x - self.region.min_x) / self.partition_size))
        row = int(math.floor((position.y - self.region.min_y) / self.partition_size))
        return (column, row)

    def cell_index(self, position: Vector) -> Optional[int]:
        """
        Compute the flat cell index for a position.

        Returns:
            Index into the cell list, or None if the position lies outside
            the world region or the grid
        """
        if not self.region.contains(position):
            return None

        column, row = self.cell_coords(position)
        if not (0 <= column < self.columns and 0 <= row < self.rows):
            return None

        return row * self.columns + column

    def cell(self, column: int, row: int) -> list[Cluster]:
        """Return the cluster list owned by a cell."""
        return self._cells[row * self.columns + column]

    def cell_at(self, index: int) -> list[Cluster]:
        return self._cells[index]

    def merge_neighbors(self, column: int, row: int) -> Iterator[Tuple[int, int]]:
        """Yield the (column, row) of each neighbor a cell is merged with."""
        for dx, dy in MERGE_NEIGHBOR_OFFSETS:
            yield (column + dx, row + dy)

    def iter_cells(self) -> Iterator[list[Cluster]]:
        """Yield every cell's cluster list in row-major order."""
        yield from self._cells

    @property
    def cell_count(self) -> int:
        return len(self._cells)

    @property
    def occupied_cell_count(self) -> int:
        """Number of cells holding at least one cluster."""
        return sum(1 for cell in self._cells if cell)

    def __repr__(self) -> str:
        return (
            f"PartitionGrid({self.columns}x{self.rows}, "
            f"{self.occupied_cell_count} cells | "
            f"{sum(len(c) for c in self._cells)} clusters)"
        )


def grid_label(
    position: Vector,
    region: WorldRegion,
    cell_size: float = WORLD_CELL_SIZE,
) -> str:
    """
    Compute the map grid label (e.g. "B3") for a position.

    Columns are lettered from 'A', rows are numbered from 1.

    Args:
        position: World position
        region: World boundary the grid starts from
        cell_size: Size of one map grid cell in world units

    Returns:
        Grid label string
    """
    column = int(math.floor((position.x - region.min_x) / cell_size))
    row = int(math.floor((position.y - region.min_y) / cell_size))
    return f"{chr(ord('A') + column)}{row + 1}"
