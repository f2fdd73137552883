"""
Incremental point clustering per category.

Points are absorbed one at a time into growing bounding-box clusters
within their grid cell, then a single sweep merges clusters that
straddle cell boundaries.
"""

import logging
from typing import Iterable, Optional, Tuple

from .config import ClusteringConfig
from .merging import merge_adjacent_cells
from .spatial_index import PartitionGrid
from .types import (
    Cluster,
    ClusteringStateError,
    ClusterResult,
    PointInstance,
    Vector,
    WorldRegion,
)


logger = logging.getLogger(__name__)


class CategoryGrid:
    """
    Clusters for a single category over the whole world region.

    Lifecycle: add_instance() any number of times, then build_clusters()
    exactly once, after which the grid is read-only.
    """

    def __init__(self, region: WorldRegion, config: ClusteringConfig):
        self.config = config
        self._grid = PartitionGrid(region, config.partition_size)
        self._clusters: Optional[Tuple[Cluster, ...]] = None

        self.accepted_points = 0
        self.rejected_points = 0

        logger.debug("Created %r", self._grid)

    @property
    def grid(self) -> PartitionGrid:
        return self._grid

    @property
    def is_finalized(self) -> bool:
        return self._clusters is not None

    def add_instance(self, position: Vector) -> bool:
        """
        Absorb a point into the clusters of its grid cell.

        The point joins the first cluster, in insertion order, whose box
        inflated by the merge threshold contains it. This is first-fit, not
        nearest-fit: a closer cluster later in the list is never considered.
        If no cluster takes the point, a new single-point cluster is appended.

        Args:
            position: World position of the point

        Returns:
            False if the point lies outside the world region and was
            discarded, True otherwise

        Raises:
            ClusteringStateError: If build_clusters() has already run
        """
        if self.is_finalized:
            raise ClusteringStateError("Cannot add points after clusters are built")

        index = self._grid.cell_index(position)
        if index is None:
            self.rejected_points += 1
            return False

        self.accepted_points += 1
        clusters = self._grid.cell_at(index)
        threshold = self.config.merge_threshold

        for i, cluster in enumerate(clusters):
            absorbed = cluster.absorb(position, threshold)
            if absorbed is not None:
                clusters[i] = absorbed
                return True

        clusters.append(Cluster.from_point(position))
        return True

    def build_clusters(self) -> Tuple[Cluster, ...]:
        """
        Merge clusters across cell boundaries and freeze the result.

        Returns:
            All remaining clusters, cell by cell in row-major order

        Raises:
            ClusteringStateError: If called more than once
        """
        if self.is_finalized:
            raise ClusteringStateError("Clusters have already been built")

        merge_adjacent_cells(self._grid, self.config.merge_threshold)

        clusters: list[Cluster] = []
        for cell in self._grid.iter_cells():
            clusters.extend(cell)
        self._clusters = tuple(clusters)

        return self._clusters

    @property
    def clusters(self) -> Tuple[Cluster, ...]:
        """
        Finalized clusters.

        Raises:
            ClusteringStateError: If build_clusters() has not run yet
        """
        if self._clusters is None:
            raise ClusteringStateError("Clusters have not been built yet")
        return self._clusters

    def result(self, category: str) -> ClusterResult:
        """Package the finalized clusters with statistics."""
        return ClusterResult.create(
            category,
            list(self.clusters),
            self.accepted_points,
            self.rejected_points,
        )


class CategoryClusterer:
    """
    Routes categorized points to one independent CategoryGrid each.

    Grids are created lazily on the first point of a category and share
    nothing with one another.
    """

    def __init__(self, region: WorldRegion, config: Optional[ClusteringConfig] = None):
        self.region = region
        self.config = config if config is not None else ClusteringConfig()
        self._grids: dict[str, CategoryGrid] = {}
        self._finalized = False

    def add(self, category: str, position: Vector) -> bool:
        """
        Add one point to its category's grid.

        Returns:
            True if the point was accepted, False if it was out of bounds
        """
        if self._finalized:
            raise ClusteringStateError("Cannot add points after finalize()")

        grid = self._grids.get(category)
        if grid is None:
            grid = CategoryGrid(self.region, self.config)
            self._grids[category] = grid

        return grid.add_instance(position)

    def add_many(self, points: Iterable[PointInstance]) -> int:
        """
        Add a stream of point instances.

        Returns:
            Number of points accepted
        """
        accepted = 0
        for point in points:
            if self.add(point.category, point.position):
                accepted += 1
        return accepted

    @property
    def categories(self) -> list[str]:
        """Categories seen so far, in first-seen order."""
        return list(self._grids)

    def finalize(self) -> dict[str, ClusterResult]:
        """
        Build clusters for every category.

        Returns:
            Dict mapping category -> ClusterResult, in first-seen order
        """
        if self._finalized:
            raise ClusteringStateError("finalize() has already run")
        self._finalized = True

        results: dict[str, ClusterResult] = {}
        for category, grid in self._grids.items():
            grid.build_clusters()
            results[category] = grid.result(category)
            logger.debug(
                "%s: %d points -> %d clusters (%d discarded)",
                category,
                grid.accepted_points,
                results[category].stats.cluster_count,
                grid.rejected_points,
            )

        return results


def cluster_points(
    points: Iterable[PointInstance],
    region: WorldRegion,
    config: Optional[ClusteringConfig] = None,
) -> dict[str, ClusterResult]:
    """
    Cluster categorized points in one call.

    Args:
        points: Finite stream of point instances
        region: World boundary
        config: Clustering parameters (defaults tuned for world maps)

    Returns:
        Dict mapping category -> ClusterResult
    """
    clusterer = CategoryClusterer(region, config)
    clusterer.add_many(points)
    return clusterer.finalize()
