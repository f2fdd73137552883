"""
Immutable data types for point clustering.

All types are frozen dataclasses to enforce immutability.
State transitions return new instances rather than mutating.
"""

from dataclasses import dataclass
from typing import Optional, Tuple
import math


class ConfigurationError(ValueError):
    """Raised when clustering parameters or the world region are unusable."""


class ClusteringStateError(RuntimeError):
    """Raised when a grid is used out of order (e.g. adding after finalize)."""


@dataclass(frozen=True)
class Vector:
    """
    World position of a point instance.

    The z component is carried along from the source data but is never
    used by any cell or distance test.
    """
    x: float
    y: float
    z: float = 0.0


@dataclass(frozen=True)
class WorldRegion:
    """
    Axis-aligned rectangle bounding all valid input positions.

    Membership is half-open: a position exactly on max_x or max_y
    lies outside the region.
    """
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def __post_init__(self):
        bounds = (self.min_x, self.min_y, self.max_x, self.max_y)
        if not all(math.isfinite(b) for b in bounds):
            raise ConfigurationError(f"World region bounds must be finite, got {bounds}")
        if self.max_x <= self.min_x or self.max_y <= self.min_y:
            raise ConfigurationError(
                f"World region is empty: ({self.min_x}, {self.min_y}) - ({self.max_x}, {self.max_y})"
            )

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def contains(self, position: Vector) -> bool:
        """Check if a position lies in [min, max) on both axes."""
        return (
            self.min_x <= position.x < self.max_x
            and self.min_y <= position.y < self.max_y
        )


@dataclass(frozen=True)
class PointInstance:
    """A single categorized point read from the source data."""
    category: str
    position: Vector


@dataclass(frozen=True)
class Cluster:
    """
    Axis-aligned bounding box of grouped points plus a member count.

    The box only ever grows. absorb() and combine_with() return a new,
    larger cluster on success and None when the candidate is too far away.
    """
    min_x: float
    max_x: float
    min_y: float
    max_y: float
    count: int

    @staticmethod
    def from_point(position: Vector) -> "Cluster":
        """Create a single-point cluster whose box is the point itself."""
        return Cluster(
            min_x=position.x,
            max_x=position.x,
            min_y=position.y,
            max_y=position.y,
            count=1,
        )

    @property
    def center_x(self) -> float:
        return (self.min_x + self.max_x) * 0.5

    @property
    def center_y(self) -> float:
        return (self.min_y + self.max_y) * 0.5

    def contains(self, position: Vector) -> bool:
        """Check if a position lies inside the (closed) bounding box."""
        return (
            self.min_x <= position.x <= self.max_x
            and self.min_y <= position.y <= self.max_y
        )

    def absorb(self, position: Vector, threshold: float) -> Optional["Cluster"]:
        """
        Absorb a point if it falls inside the box inflated by threshold.

        The inflated box is open: a point exactly threshold away from an
        edge is not absorbed.

        Args:
            position: Point to absorb
            threshold: Distance the box is inflated by on all four sides

        Returns:
            Grown cluster with count + 1, or None if the point is too far
        """
        if not (
            self.min_x - threshold < position.x < self.max_x + threshold
            and self.min_y - threshold < position.y < self.max_y + threshold
        ):
            return None

        return Cluster(
            min_x=min(self.min_x, position.x),
            max_x=max(self.max_x, position.x),
            min_y=min(self.min_y, position.y),
            max_y=max(self.max_y, position.y),
            count=self.count + 1,
        )

    def is_close_to(self, other: "Cluster", threshold: float) -> bool:
        """
        Symmetric closeness test used when merging across cells.

        Both pairs of opposing edges must be within threshold of each other
        on both axes. This is stricter than the inflation test in absorb().
        """
        return (
            abs(self.max_x - other.min_x) < threshold
            and abs(self.min_x - other.max_x) < threshold
            and abs(self.max_y - other.min_y) < threshold
            and abs(self.min_y - other.max_y) < threshold
        )

    def combine_with(self, other: "Cluster", threshold: float) -> Optional["Cluster"]:
        """
        Combine with another cluster if the two pass is_close_to().

        Returns:
            Cluster covering the union of both boxes with the summed count,
            or None if the clusters are not close enough
        """
        if not self.is_close_to(other, threshold):
            return None

        return Cluster(
            min_x=min(self.min_x, other.min_x),
            max_x=max(self.max_x, other.max_x),
            min_y=min(self.min_y, other.min_y),
            max_y=max(self.max_y, other.max_y),
            count=self.count + other.count,
        )

    def as_row(self) -> Tuple[float, float, int]:
        """Return (center_x, center_y, count) for serialization."""
        return (self.center_x, self.center_y, self.count)


@dataclass(frozen=True)
class ClusterStats:
    """Statistics about the clustering of one category."""
    accepted_points: int
    rejected_points: int
    cluster_count: int
    max_cluster_size: int
    avg_cluster_size: float


@dataclass(frozen=True)
class ClusterResult:
    """
    Finalized clusters for one category.

    Contains the clusters in cell order and statistics about the run.
    """
    category: str
    clusters: Tuple[Cluster, ...]
    stats: ClusterStats

    @staticmethod
    def create(
        category: str,
        clusters: list["Cluster"],
        accepted: int,
        rejected: int,
    ) -> "ClusterResult":
        """
        Factory method to create a ClusterResult with computed stats.

        Args:
            category: Category the clusters belong to
            clusters: Finalized clusters
            accepted: Number of points that passed the bounds check
            rejected: Number of points discarded as out of bounds

        Returns:
            New ClusterResult with computed statistics
        """
        sizes = [c.count for c in clusters]

        stats = ClusterStats(
            accepted_points=accepted,
            rejected_points=rejected,
            cluster_count=len(clusters),
            max_cluster_size=max(sizes) if sizes else 0,
            avg_cluster_size=sum(sizes) / len(sizes) if sizes else 0.0,
        )

        return ClusterResult(
            category=category,
            clusters=tuple(clusters),
            stats=stats,
        )

    @property
    def total_count(self) -> int:
        """Sum of member counts over all clusters."""
        return sum(c.count for c in self.clusters)
