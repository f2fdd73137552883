"""
Clustering parameters.

The default values were tuned by hand against world maps whose grid cells
measure WORLD_CELL_SIZE units along each axis.
"""

from dataclasses import dataclass
import math

from .types import ConfigurationError


# A single map grid cell always represents this many world units per axis
WORLD_CELL_SIZE = 50400.0

DEFAULT_THRESHOLD_RATIO = 0.04   # 25x25 groups per map cell
DEFAULT_PARTITION_RATIO = 0.2


@dataclass(frozen=True)
class ClusteringConfig:
    """
    Partition cell size and merge threshold for a clustering run.

    partition_size must be at least twice merge_threshold. A smaller
    partition lets clusters that should merge sit two cells apart, where
    the cross-cell sweep never compares them.
    """
    partition_size: float = WORLD_CELL_SIZE * DEFAULT_PARTITION_RATIO
    merge_threshold: float = WORLD_CELL_SIZE * DEFAULT_THRESHOLD_RATIO

    def __post_init__(self):
        if not math.isfinite(self.merge_threshold):
            raise ConfigurationError(
                f"merge_threshold must be finite, got {self.merge_threshold}"
            )
        if not math.isfinite(self.partition_size):
            raise ConfigurationError(
                f"partition_size must be finite, got {self.partition_size}"
            )
        if self.merge_threshold <= 0:
            raise ConfigurationError(
                f"merge_threshold must be positive, got {self.merge_threshold}"
            )
        if self.partition_size <= 0:
            raise ConfigurationError(
                f"partition_size must be positive, got {self.partition_size}"
            )
        if self.partition_size < 2.0 * self.merge_threshold:
            raise ConfigurationError(
                f"partition_size ({self.partition_size}) must be at least twice "
                f"merge_threshold ({self.merge_threshold})"
            )

    @staticmethod
    def from_cell_size(
        cell_size: float,
        threshold_ratio: float = DEFAULT_THRESHOLD_RATIO,
        partition_ratio: float = DEFAULT_PARTITION_RATIO,
    ) -> "ClusteringConfig":
        """
        Build a configuration scaled to a map grid cell size.

        Args:
            cell_size: Size of one map grid cell in world units
            threshold_ratio: merge_threshold as a fraction of cell_size
            partition_ratio: partition_size as a fraction of cell_size

        Returns:
            Validated ClusteringConfig
        """
        return ClusteringConfig(
            partition_size=cell_size * partition_ratio,
            merge_threshold=cell_size * threshold_ratio,
        )
