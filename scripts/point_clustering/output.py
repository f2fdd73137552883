"""
Output generation for clustered points.

Writes cluster tables as CSV and per-category density overlays as SVG.
"""

import csv
import logging
import math
import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Tuple

from .spatial_index import grid_label
from .types import ClusterResult, Cluster, Vector, WorldRegion


logger = logging.getLogger(__name__)


SVG_NS = "http://www.w3.org/2000/svg"

MACHINE_CSV_HEADER = ["map", "x", "y", "variety", "count"]

MIN_POINT_RADIUS = 3.0
MAX_POINT_RADIUS = 10.0
POINT_COLOR = "#FFFFFF"


def write_clusters_csv(
    output_path: Path,
    map_name: str,
    results: dict[str, ClusterResult],
) -> None:
    """
    Write one row per cluster in a flat, machine-readable table.

    Args:
        output_path: Path to write the CSV file
        map_name: Map name written into every row
        results: Dict mapping category -> ClusterResult
    """
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(MACHINE_CSV_HEADER)

        for category, result in results.items():
            for cluster in result.clusters:
                x, y, count = cluster.as_row()
                writer.writerow([map_name, x, y, category, count])

    logger.info("Wrote %s", output_path)


def write_readable_csv(
    output_path: Path,
    results: dict[str, ClusterResult],
) -> None:
    """
    Write categories side by side, three columns each.

    Shorter categories are padded with empty cells so every row has
    the same number of columns.

    Args:
        output_path: Path to write the CSV file
        results: Dict mapping category -> ClusterResult
    """
    categories = list(results)

    header: list[str] = []
    for category in categories:
        header.extend([f"{category}.X", f"{category}.Y", f"{category}.Count"])

    most = max((len(r.clusters) for r in results.values()), default=0)

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)

        for i in range(most):
            row: list[object] = []
            for category in categories:
                clusters = results[category].clusters
                if i < len(clusters):
                    row.extend(clusters[i].as_row())
                else:
                    row.extend(["", "", ""])
            writer.writerow(row)

    logger.info("Wrote %s", output_path)


def safe_file_name(name: str) -> str:
    """Replace path separators so a category can be used as a file name."""
    for sep in {"/", "\\", os.sep}:
        name = name.replace(sep, "_")
    return name


def point_radius(count: int) -> float:
    """Circle radius in pixels for a cluster of the given size."""
    return min(math.log2(count) + MIN_POINT_RADIUS, MAX_POINT_RADIUS)


def image_dimensions(region: WorldRegion, image_width: int) -> Tuple[int, int, float]:
    """
    Compute overlay image size for a region.

    Args:
        region: World boundary covered by the image
        image_width: Desired width in pixels

    Returns:
        Tuple of (width, height, pixels_per_world_unit)
    """
    scale = image_width / region.width
    height = int(math.ceil(region.height * scale))
    return (image_width, height, scale)


def create_svg_root(width: int, height: int) -> ET.Element:
    """
    Create an SVG root element with proper namespace.

    Args:
        width: Image width in pixels
        height: Image height in pixels

    Returns:
        SVG root Element
    """
    ET.register_namespace("", SVG_NS)

    root = ET.Element("svg")
    root.set("xmlns", SVG_NS)
    root.set("width", str(width))
    root.set("height", str(height))
    root.set("viewBox", f"0 0 {width} {height}")

    return root


def create_circle_element(cx: float, cy: float, radius: float) -> ET.Element:
    """Create a filled circle element."""
    elem = ET.Element("circle")
    elem.set("cx", f"{cx:.2f}")
    elem.set("cy", f"{cy:.2f}")
    elem.set("r", f"{radius:g}")
    elem.set("fill", POINT_COLOR)
    return elem


def create_cluster_element(
    cluster: Cluster,
    region: WorldRegion,
    scale: float,
) -> ET.Element:
    """
    Create a circle for one cluster, titled with its grid label and count.

    Args:
        cluster: Finalized cluster
        region: World boundary the image covers
        scale: Pixels per world unit

    Returns:
        Circle Element
    """
    elem = create_circle_element(
        (cluster.center_x - region.min_x) * scale,
        (cluster.center_y - region.min_y) * scale,
        point_radius(cluster.count),
    )

    title = ET.SubElement(elem, "title")
    label = grid_label(Vector(cluster.center_x, cluster.center_y), region)
    title.text = f"{label}: {cluster.count}"

    return elem


def write_cluster_svg(
    output_path: Path,
    result: ClusterResult,
    region: WorldRegion,
    image_width: int = 2048,
) -> None:
    """
    Write a density overlay for one category.

    Each cluster becomes a circle sized by its member count. Two tiny
    markers in opposite corners pin the image extent so overlays for
    different categories line up when composited.

    Args:
        output_path: Path to write the SVG file
        result: Clusters for the category
        region: World boundary the image covers
        image_width: Width of the image in pixels
    """
    width, height, scale = image_dimensions(region, image_width)
    root = create_svg_root(width, height)

    group = ET.SubElement(root, "g")
    group.set("id", result.category)
    title = ET.SubElement(group, "title")
    title.text = f"{result.category} ({result.stats.cluster_count} clusters)"

    group.append(create_circle_element(0.0, 0.0, 1.0))
    group.append(create_circle_element(width - 1.0, height - 1.0, 1.0))

    for cluster in result.clusters:
        group.append(create_cluster_element(cluster, region, scale))

    tree = ET.ElementTree(root)
    ET.indent(tree, space="  ")

    with open(output_path, "wb") as f:
        tree.write(f, encoding="UTF-8", xml_declaration=True)

    logger.debug("Wrote %s", output_path)


def log_cluster_stats(result: ClusterResult) -> None:
    """
    Log statistics about a clustering result.

    Args:
        result: ClusterResult to report on
    """
    stats = result.stats
    reduction = (
        (1 - stats.cluster_count / stats.accepted_points) * 100
        if stats.accepted_points > 0
        else 0
    )

    logger.info(
        "%s: %d points -> %d clusters (max %d, avg %.2f, %.1f%% reduction)",
        result.category,
        stats.accepted_points,
        stats.cluster_count,
        stats.max_cluster_size,
        stats.avg_cluster_size,
        reduction,
    )
    if stats.rejected_points:
        logger.info("%s: %d points outside the world region were discarded",
                    result.category, stats.rejected_points)
