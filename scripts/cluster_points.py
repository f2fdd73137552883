#!/usr/bin/env python3
"""
Point Clustering Tool

Groups categorized point positions into bounding-box clusters and writes
cluster tables (CSV) plus one density overlay (SVG) per category.

Usage:
    python cluster_points.py <points.csv> <output_dir> --region=min_x,min_y,max_x,max_y
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from point_clustering import (
    CategoryClusterer,
    ClusteringConfig,
    ConfigurationError,
    parse_region,
    read_category_map,
    read_point_csv,
    write_cluster_svg,
    write_clusters_csv,
    write_readable_csv,
)
from point_clustering.config import DEFAULT_PARTITION_RATIO, DEFAULT_THRESHOLD_RATIO, WORLD_CELL_SIZE
from point_clustering.output import log_cluster_stats, safe_file_name


logger = logging.getLogger("cluster_points")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Cluster categorized point positions into density groups"
    )
    parser.add_argument("input", help="Input CSV with category,x,y[,z] columns")
    parser.add_argument("output_dir", help="Directory to write output files to")
    parser.add_argument(
        "--region",
        required=True,
        help="World boundary as min_x,min_y,max_x,max_y",
    )
    parser.add_argument(
        "--map-name",
        help="Map name used in output rows and file names (default: input file stem)",
    )
    parser.add_argument(
        "--name",
        default="Clusters",
        help="Prefix for output file names (default: Clusters)",
    )
    parser.add_argument(
        "--cell-size",
        type=float,
        default=WORLD_CELL_SIZE,
        help="Map grid cell size the default partition size and threshold "
             "are scaled from (default: %(default)g)",
    )
    parser.add_argument(
        "--partition-size",
        type=float,
        help=f"Grid cell size used to bucket points "
             f"(default: {DEFAULT_PARTITION_RATIO:g} x cell size)",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        help=f"Maximum gap for points to be grouped "
             f"(default: {DEFAULT_THRESHOLD_RATIO:g} x cell size)",
    )
    parser.add_argument(
        "--category-map",
        help="CSV with source,category columns; unmapped sources are ignored",
    )
    parser.add_argument(
        "--image-width",
        type=int,
        default=2048,
        help="Width of overlay images in pixels (default: 2048)",
    )
    parser.add_argument(
        "--no-images",
        action="store_true",
        help="Skip writing SVG overlays",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def build_config(args: argparse.Namespace) -> ClusteringConfig:
    """Scale the defaults to --cell-size, then apply explicit overrides."""
    if args.partition_size is None and args.threshold is None:
        return ClusteringConfig.from_cell_size(args.cell_size)

    partition_size = args.partition_size
    if partition_size is None:
        partition_size = args.cell_size * DEFAULT_PARTITION_RATIO
    threshold = args.threshold
    if threshold is None:
        threshold = args.cell_size * DEFAULT_THRESHOLD_RATIO

    return ClusteringConfig(partition_size=partition_size, merge_threshold=threshold)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    input_path = Path(args.input)
    if not input_path.exists():
        logger.error("Input file not found: %s", input_path)
        return 1

    try:
        region = parse_region(args.region)
        config = build_config(args)
    except ConfigurationError as e:
        logger.error("%s", e)
        return 1

    output_dir = Path(args.output_dir)
    map_name = args.map_name or input_path.stem

    logger.info("Input: %s", input_path)
    logger.info("Output: %s", output_dir)
    logger.info("Partition size: %g, threshold: %g", config.partition_size, config.merge_threshold)

    try:
        category_map = None
        if args.category_map:
            category_map = read_category_map(Path(args.category_map))
            logger.info("Loaded %d category mappings", len(category_map))

        points, _ = read_point_csv(input_path, category_map)
        logger.info("Read %d point instances", len(points))

        if not points:
            logger.warning("No points found to cluster")
            return 0

        clusterer = CategoryClusterer(region, config)
        clusterer.add_many(points)
        logger.info("Categories: %s", ", ".join(clusterer.categories))

        results = clusterer.finalize()
        for result in results.values():
            log_cluster_stats(result)

        output_dir.mkdir(parents=True, exist_ok=True)
        write_clusters_csv(output_dir / f"{args.name}_{map_name}.csv", map_name, results)
        write_readable_csv(output_dir / f"{args.name}_{map_name}_Readable.csv", results)

        if not args.no_images:
            image_dir = output_dir / args.name
            image_dir.mkdir(exist_ok=True)
            for category, result in results.items():
                logger.debug("Generating image for %s", category)
                write_cluster_svg(
                    image_dir / safe_file_name(f"{map_name}_{category}.svg"),
                    result,
                    region,
                    args.image_width,
                )
    except (OSError, UnicodeDecodeError) as e:
        logger.error("%s", e)
        return 1

    logger.info("Done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
