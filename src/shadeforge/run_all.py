#!/usr/bin/env python3
"""
shadeforge - Orchestrator

Generate lampshades and lithophanes from JSON parameter files and export them.

Usage:
    shadeforge shape --params lampshade.json --output outputs
    shadeforge shape --type spiral_twist --type lattice
    shadeforge relief --image photo.png --params relief.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional
from datetime import datetime

from .common.config import EngineConfig, DEFAULT_CONFIG
from .common.errors import MeshGenerationError
from .common.io import load_image, load_params, save_mesh, build_metadata
from .common.mesh_ops import estimate_print
from .shape import ShapeParameters, generate_shape_mesh
from .relief import LithophaneParameters, generate_relief_mesh, placeholder_shell

logger = logging.getLogger(__name__)


def run_shape(data: Dict[str, Any], config: EngineConfig, output_dir: Path) -> dict:
    """Generate and save one lampshade."""
    params = ShapeParameters.from_dict(data)
    mesh = generate_shape_mesh(params, config)

    metadata = build_metadata(mesh, "shape", params.shape_type.value, params.to_dict())
    output_path = output_dir / f"lampshade-{params.shape_type.value}.stl"
    save_mesh(mesh, output_path, metadata)

    result = metadata.to_dict()
    result["print_estimate"] = estimate_print(mesh, config).to_dict()
    result["output"] = str(output_path)
    return result


def run_relief(
    data: Dict[str, Any],
    image_path: Optional[Path],
    config: EngineConfig,
    output_dir: Path
) -> dict:
    """Generate and save one relief; falls back to a plain shell without an image."""
    params = LithophaneParameters.from_dict(data)

    if image_path is None:
        logger.warning("No image supplied, exporting placeholder shell")
        mesh = placeholder_shell(params, config=config)
    else:
        mesh = generate_relief_mesh(load_image(image_path), params)

    metadata = build_metadata(mesh, "relief", params.carrier.value, params.to_dict())
    output_path = output_dir / f"lithophane-{params.carrier.value}.stl"
    save_mesh(mesh, output_path, metadata)

    result = metadata.to_dict()
    result["print_estimate"] = estimate_print(mesh, config).to_dict()
    result["output"] = str(output_path)
    return result


def run_all(
    jobs: List[Dict[str, Any]],
    config: EngineConfig,
    output_dir: Path,
    image_path: Optional[Path] = None
) -> dict:
    """
    Run every job, collecting results and errors.

    Args:
        jobs: Flat parameter mappings, each with a "kind" of "shape" or "relief"
        config: Engine configuration
        output_dir: Output directory
        image_path: Source image for relief jobs

    Returns:
        Summary dictionary
    """
    summary = {
        "timestamp": datetime.now().isoformat(),
        "config": config.to_dict(),
        "results": [],
        "errors": []
    }

    for index, job in enumerate(jobs):
        job = dict(job)
        kind = job.pop("kind", "shape")
        logger.info(f"\n--- Job {index}: {kind} {job.get('type', '')} ---")

        try:
            if kind == "relief":
                result = run_relief(job, image_path, config, output_dir)
            else:
                result = run_shape(job, config, output_dir)
            summary["results"].append({"job": index, "status": "success", "result": result})
            logger.info(f"Mesh stats: {result['n_vertices']} verts, watertight={result['is_watertight']}")
        except MeshGenerationError as e:
            logger.error(f"Job {index} failed: {e}")
            summary["errors"].append({"job": index, "kind": kind, "error": str(e)})

    return summary


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="shadeforge - Generate printable lampshades and lithophanes"
    )
    parser.add_argument(
        "command",
        choices=["shape", "relief"],
        help="Generator to run"
    )
    parser.add_argument(
        "--params", "-p",
        type=Path,
        help="JSON file with one parameter mapping or a list of them"
    )
    parser.add_argument(
        "--type", "-t",
        action="append",
        default=[],
        help="Shape/carrier type to generate with default parameters (repeatable)"
    )
    parser.add_argument(
        "--random", "-r",
        type=int,
        action="append",
        default=[],
        metavar="SEED",
        help="Add a random shape design drawn from SEED (repeatable)"
    )
    parser.add_argument(
        "--image", "-i",
        type=Path,
        help="Source image for relief generation"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="EngineConfig JSON file"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Output directory"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )

    args = parser.parse_args(argv)

    # Setup logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    config = EngineConfig.from_json(args.config) if args.config else DEFAULT_CONFIG
    output_dir = args.output or config.output_dir

    # Collect jobs
    jobs = []
    if args.params:
        loaded = load_params(args.params)
        jobs.extend(loaded if isinstance(loaded, list) else [loaded])
    jobs.extend({"type": t} for t in args.type)
    if args.command == "shape":
        jobs.extend(ShapeParameters.random(seed).to_dict() for seed in args.random)
    if not jobs:
        jobs.append({})
    for job in jobs:
        job.setdefault("kind", args.command)

    logger.info(f"Running {len(jobs)} {args.command} job(s)")
    logger.info(f"Output: {output_dir}")

    summary = run_all(jobs, config, output_dir, image_path=args.image)

    # Save summary
    summary_path = output_dir / "run_summary.json"
    summary_path.parent.mkdir(parents=True, exist_ok=True)
    with open(summary_path, 'w') as f:
        json.dump(summary, f, indent=2)

    logger.info(f"\nSummary saved to: {summary_path}")

    n_success = len(summary["results"])
    n_errors = len(summary["errors"])

    logger.info(f"\n{'='*60}")
    logger.info(f"COMPLETE: {n_success} successful, {n_errors} errors")
    logger.info(f"{'='*60}")

    if n_errors > 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
