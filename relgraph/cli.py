#!/usr/bin/env python3
"""Command line interface for the relation graph engine

Example usage::

    python -m relgraph.cli render medals.csv --min-weight 2 --output graph.html
    python -m relgraph.cli options medals.csv
"""
from __future__ import annotations

import argparse
import sys
import time

from relgraph.core.config_manager import ConfigurationError, load_config
from relgraph.core.exceptions import RelGraphException
from relgraph.core.logging_config import (
    auto_setup_logging, get_logger, log_operation_end, setup_logging
)
from relgraph.interactive_graph_visualizer import RelationGraphVisualizer

logger = get_logger("cli")


def _render(viz: RelationGraphVisualizer, args: argparse.Namespace) -> int:
    viz.update_filters(
        node_focus=args.focus,
        secondary_focus=args.secondary_focus,
        label_filter=args.label,
        min_weight=args.min_weight,
        hide_disconnected=not args.show_disconnected,
    )
    started = time.time()
    ticks = viz.run_until_settled(args.ticks)
    log_operation_end(logger, "layout", time.time() - started,
                      ticks=ticks, state=viz.solver.state.value)

    for warning in viz.status()["warnings"]:
        print(f"warning: {warning}", file=sys.stderr)

    path = viz.write_html(args.output)
    print(f"{viz.status_line()} -> {path}")
    return 0


def _options(viz: RelationGraphVisualizer) -> int:
    options = viz.options
    print(f"Sources ({len(options.source_ids)}): {', '.join(options.source_ids)}")
    print(f"Targets ({len(options.target_ids)}): {', '.join(options.target_ids)}")
    print(f"Labels: {', '.join(options.labels)}")
    print(f"Max weight: {options.max_weight}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("csv", help="CSV file with relation rows")
    common.add_argument("--config", help="YAML configuration file")
    common.add_argument("--log-level", default=None, help="Override log level")

    parser = argparse.ArgumentParser(description="Relation graph visualization CLI")
    sub = parser.add_subparsers(dest="command")

    render_parser = sub.add_parser("render", parents=[common],
                                   help="Filter, lay out and render a CSV as HTML")
    render_parser.add_argument("--focus", default=None, help="Keep only edges touching this node")
    render_parser.add_argument("--secondary-focus", default=None,
                               help="Also require edges to touch this node")
    render_parser.add_argument("--label", default=None, help="Keep only edges with this label")
    render_parser.add_argument("--min-weight", type=int, default=1)
    render_parser.add_argument("--show-disconnected", action="store_true",
                               help="Keep nodes without visible edges")
    render_parser.add_argument("--ticks", type=int, default=1000, help="Maximum simulation ticks")
    render_parser.add_argument("--output", default="graph.html")

    sub.add_parser("options", parents=[common], help="List filter options for a CSV")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config(args.config, force_reload=True)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    if args.log_level:
        setup_logging(log_level=args.log_level)
    else:
        auto_setup_logging(config.system.log_level)

    viz = RelationGraphVisualizer(config)
    try:
        if not viz.load_csv(args.csv):
            print("No data to render", file=sys.stderr)
            return 1
        if args.command == "render":
            return _render(viz, args)
        return _options(viz)
    except RelGraphException as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        viz.close()


if __name__ == "__main__":
    sys.exit(main())
