"""
Surface Drape - Main CLI

Drapes lines over a mesh or intersects an implicit function with it.

Usage:
    python -m surface_drape.main line --mesh <obj> --line <csv> [options]
    python -m surface_drape.main intersect --mesh <obj> --sphere X Y Z R [options]

Example:
    python -m surface_drape.main line --mesh terrain.obj --line track.csv \\
        --z-offset 2 --min-vertices 5000 --output track.obj
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from typing import List, Optional

from . import __version__
from .config import DrapeConfig
from .engine import DrapeEngine
from .errors import DrapeError
from .functions import ImplicitFunction, plane, sphere, paraboloid
from .io.line_reader import load_line_csv
from .io.mesh_loader import load_mesh
from .io.obj_exporter import ObjLineRenderer, export_table_csv


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """
    Configure logging to console and optionally to file.

    Args:
        verbose: If True, use DEBUG level; otherwise INFO
        log_file: Optional path to log file. If provided, logs will be written to file.
    """
    level = logging.DEBUG if verbose else logging.INFO

    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear any existing handlers
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)  # Always log DEBUG to file
        file_formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with 'line' and 'intersect' subcommands."""
    parser = argparse.ArgumentParser(
        description='Drape lines over 3D surfaces or intersect implicit functions with them',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    common = argparse.ArgumentParser(add_help=False)

    common.add_argument(
        '--mesh',
        type=str,
        required=True,
        help='Surface mesh (Wavefront OBJ)'
    )

    common.add_argument(
        '--output', '-o',
        type=str,
        required=True,
        help='Output file: .obj renders lines, anything else writes a CSV table'
    )

    common.add_argument(
        '--min-vertices',
        type=int,
        default=0,
        help='Refine the mesh to at least this many vertices (default: 0 = no refinement)'
    )

    common.add_argument(
        '--max-rounds',
        type=int,
        default=DrapeConfig.max_refine_rounds,
        help=f'Maximum refinement rounds (default: {DrapeConfig.max_refine_rounds})'
    )

    common.add_argument(
        '--color',
        type=str,
        default=None,
        help='Line color recorded in OBJ output'
    )

    common.add_argument(
        '--width',
        type=float,
        default=None,
        help='Line width recorded in OBJ output'
    )

    common.add_argument(
        '--report',
        type=str,
        default=None,
        help='Write a JSON run report to this path'
    )

    common.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    common.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write a DEBUG log to this file'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    line = subparsers.add_parser(
        'line',
        parents=[common],
        help='Drape a line (CSV with x,y columns, NA for breaks) over the mesh'
    )
    line.add_argument(
        '--line',
        type=str,
        required=True,
        help='Input line CSV'
    )
    line.add_argument(
        '--z-offset',
        type=float,
        default=0.0,
        help='Height added to every draped point (default: 0)'
    )
    line.add_argument(
        '--log',
        type=str,
        default='',
        choices=['', 'x', 'y', 'xy'],
        help='Apply log10 to these input axes before draping'
    )

    intersect = subparsers.add_parser(
        'intersect',
        parents=[common],
        help='Intersect an implicit function with the mesh'
    )
    shape = intersect.add_mutually_exclusive_group(required=True)
    shape.add_argument(
        '--plane',
        type=float,
        nargs=4,
        metavar=('A', 'B', 'C', 'D'),
        help='Plane a*x + b*y + c*z + d = 0'
    )
    shape.add_argument(
        '--sphere',
        type=float,
        nargs=4,
        metavar=('X', 'Y', 'Z', 'R'),
        help='Sphere with center (x, y, z) and radius r'
    )
    shape.add_argument(
        '--paraboloid',
        type=float,
        nargs=4,
        metavar=('X', 'Y', 'Z', 'S'),
        help='Paraboloid z = z0 + s*((x-x0)^2 + (y-y0)^2) with apex (x, y, z)'
    )
    intersect.add_argument(
        '--chain',
        action='store_true',
        help='Stitch segments into polylines (closed loops repeat their first point)'
    )
    intersect.add_argument(
        '--chain-tolerance',
        type=float,
        default=DrapeConfig.chain_tolerance,
        help=f'Endpoint matching tolerance for --chain (default: {DrapeConfig.chain_tolerance})'
    )

    return parser


def function_from_args(args: argparse.Namespace) -> ImplicitFunction:
    """Build the implicit function selected on the command line."""
    if args.plane is not None:
        return plane(*args.plane)
    if args.sphere is not None:
        x, y, z, r = args.sphere
        return sphere((x, y, z), r)
    x, y, z, s = args.paraboloid
    return paraboloid((x, y, z), s)


def run_cli(args: argparse.Namespace) -> int:
    """
    Execute one CLI command.

    Returns:
        Process exit code
    """
    logger = logging.getLogger(__name__)

    config = DrapeConfig(
        max_refine_rounds=args.max_rounds,
        chain_tolerance=getattr(args, 'chain_tolerance', DrapeConfig.chain_tolerance),
    )
    plot = args.output.lower().endswith('.obj')
    renderer = ObjLineRenderer(config.export_precision) if plot else None
    engine = DrapeEngine(config, renderer)

    style = {}
    if args.color is not None:
        style['color'] = args.color
    if args.width is not None:
        style['width'] = args.width

    mesh = load_mesh(args.mesh)

    if args.command == 'line':
        target = load_line_csv(args.line)
        result = engine.run(
            mesh, target,
            z_offset=args.z_offset,
            min_vertices=args.min_vertices,
            plot=plot,
            log_axes=args.log,
            **style
        )
    elif args.chain:
        segments = engine.intersect(
            mesh, function_from_args(args), min_vertices=args.min_vertices
        )
        polyline = segments.chain(config.chain_tolerance)
        logger.info(f"Chained {len(segments)} segments into {polyline.run_count} polylines")
        if plot:
            result = renderer.draw_polyline(polyline, **style)
        else:
            result = polyline.to_table()
    else:
        target = function_from_args(args)
        result = engine.run(
            mesh, target,
            min_vertices=args.min_vertices,
            plot=plot,
            **style
        )

    if plot:
        renderer.write(args.output, comment=f"{args.command} on {args.mesh}")
        logger.info(f"Rendered '{result}' to {args.output}")
    else:
        export_table_csv(result, args.output, config.export_precision)

    report = engine.report
    if args.report:
        with open(args.report, 'w', encoding='utf-8') as f:
            json.dump(
                {'version': __version__, 'command': args.command, **asdict(report)},
                f, indent=2
            )

    if args.command == 'line':
        print(
            f"Draped {report.input_points} points: {report.output_runs} runs, "
            f"{report.points_outside} outside the surface"
        )
    else:
        print(f"Intersection: {report.segments} segments")
    if report.refine_rounds:
        print(
            f"Mesh refined from {report.mesh_vertices} to "
            f"{report.refined_vertices} vertices in {report.refine_rounds} rounds"
        )
    print(f"Output: {args.output}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose, args.log_file)

    try:
        return run_cli(args)
    except (DrapeError, FileNotFoundError, ValueError) as e:
        logging.getLogger(__name__).error(str(e))
        print(f"\nFailed: {e}")
        return 1
    except Exception as e:
        logging.exception(f"Drape failed: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
