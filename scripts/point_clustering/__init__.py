"""
Point Clustering Module

Groups large numbers of categorized 2D point instances into compact
bounding-box clusters (center and member count) for tables and
density overlays.
"""

from .types import (
    Vector,
    WorldRegion,
    PointInstance,
    Cluster,
    ClusterResult,
    ConfigurationError,
    ClusteringStateError,
)
from .config import ClusteringConfig
from .spatial_index import PartitionGrid
from .clustering import CategoryGrid, CategoryClusterer, cluster_points
from .merging import merge_adjacent_cells
from .parsing import read_point_csv, read_category_map, parse_region
from .output import write_clusters_csv, write_readable_csv, write_cluster_svg

__all__ = [
    "Vector",
    "WorldRegion",
    "PointInstance",
    "Cluster",
    "ClusterResult",
    "ConfigurationError",
    "ClusteringStateError",
    "ClusteringConfig",
    "PartitionGrid",
    "CategoryGrid",
    "CategoryClusterer",
    "cluster_points",
    "merge_adjacent_cells",
    "read_point_csv",
    "read_category_map",
    "parse_region",
    "write_clusters_csv",
    "write_readable_csv",
    "write_cluster_svg",
]
