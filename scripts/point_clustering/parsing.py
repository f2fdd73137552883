"""
Point instance parsing.

Reads categorized point positions and category mappings from CSV
files, and world regions from command-line strings.
"""

import csv
import logging
from pathlib import Path
from typing import Optional, Tuple

from .types import ConfigurationError, PointInstance, Vector, WorldRegion


logger = logging.getLogger(__name__)


def parse_region(text: str) -> WorldRegion:
    """
    Parse a world region from "min_x,min_y,max_x,max_y".

    Raises:
        ConfigurationError: If the text is malformed or the region is empty
    """
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 4:
        raise ConfigurationError(
            f"Expected min_x,min_y,max_x,max_y but got {text!r}"
        )

    try:
        min_x, min_y, max_x, max_y = (float(p) for p in parts)
    except ValueError:
        raise ConfigurationError(f"Region contains a non-numeric value: {text!r}") from None

    return WorldRegion(min_x, min_y, max_x, max_y)


def read_category_map(path: Path) -> dict[str, str]:
    """
    Read a source-name to category mapping.

    The file is a two-column CSV with a "source,category" header.
    Several source names may map to the same category.

    Args:
        path: Path to the mapping CSV

    Returns:
        Dict mapping source name -> category
    """
    mapping: dict[str, str] = {}

    with open(path, newline="", encoding="utf-8-sig") as f:
        for row in csv.DictReader(f):
            source = (row.get("source") or "").strip()
            category = (row.get("category") or "").strip()
            if source and category:
                mapping[source] = category

    return mapping


def parse_point_row(
    row: dict[str, str],
    category_map: Optional[dict[str, str]] = None,
) -> Optional[PointInstance]:
    """
    Convert one CSV row into a point instance.

    Args:
        row: Row from csv.DictReader with category, x, y and optional z
        category_map: Optional translation of raw category names; rows
                      whose name is not in the map are dropped

    Returns:
        PointInstance, or None if the row is unusable
    """
    category = (row.get("category") or "").strip()
    if not category:
        return None

    if category_map is not None:
        mapped = category_map.get(category)
        if mapped is None:
            return None
        category = mapped

    try:
        x = float(row["x"])
        y = float(row["y"])
        z = float(row["z"]) if row.get("z") else 0.0
    except (KeyError, TypeError, ValueError):
        return None

    return PointInstance(category=category, position=Vector(x, y, z))


def read_point_csv(
    path: Path,
    category_map: Optional[dict[str, str]] = None,
) -> Tuple[list[PointInstance], int]:
    """
    Read point instances from a CSV file.

    The file must have a header with at least category, x and y columns.

    Args:
        path: Path to the points CSV
        category_map: Optional source-name to category mapping

    Returns:
        Tuple of (points, skipped_row_count)
    """
    points: list[PointInstance] = []
    skipped = 0

    with open(path, newline="", encoding="utf-8-sig") as f:
        for line_num, row in enumerate(csv.DictReader(f), start=2):
            point = parse_point_row(row, category_map)
            if point is None:
                logger.debug("Skipping %s line %d: %r", path.name, line_num, row)
                skipped += 1
                continue
            points.append(point)

    if skipped:
        logger.warning("Skipped %d unusable rows in %s", skipped, path)

    return (points, skipped)
