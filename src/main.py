"""
Render a family forest from a flat list of person records.

1) Load person records (JSON, or GEDCOM via ged4py).
2) Index parent/child relationships and build a networkx graph.
3) Validate the records (cycles, dangling references, impossible dates).
4) Select one root per family group and lay out every person.
5) Derive spouse lines, trunk lines and child paths.
6) Save the diagram, or open the interactive viewer.
"""

from dataclasses import replace
from pathlib import Path
import argparse
import logging

import networkx as nx

from connectors import derive_connectors
from graph import build_graph, build_index
from interaction import FocusState
from layout import compute_layout
from loader import DataLoadError, load_people
from models import LayoutConfig, PersonId
from plotting import TreeViewer, build_dot, plot_tree, save_tree, write_dot
from validation import validate_people

logger = logging.getLogger("famforest")


def resolve_id(G: nx.DiGraph, raw: str) -> PersonId | None:
    """Match a command-line id against the graph ids, which may be ints."""
    for pid in G:
        if str(pid) == raw:
            return pid
    return None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render a family tree from person records.")
    parser.add_argument("input", type=Path, help="People JSON file or GEDCOM (.ged) file.")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Image to write (png, svg or pdf). Opens the interactive viewer if omitted.",
    )
    parser.add_argument("--focus", help="Highlight the lineage of this person id in the image.")
    parser.add_argument("--dot", type=Path, help="Also write a Graphviz DOT file with pinned positions.")
    parser.add_argument("--card-width", type=float)
    parser.add_argument("--card-height", type=float)
    parser.add_argument("--horizontal-gap", type=float)
    parser.add_argument("--vertical-gap", type=float)
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser


def config_from_args(args: argparse.Namespace) -> LayoutConfig:
    overrides = {
        name: getattr(args, name)
        for name in ("card_width", "card_height", "horizontal_gap", "vertical_gap")
        if getattr(args, name) is not None
    }
    return replace(LayoutConfig(), **overrides)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = config_from_args(args)

    print(f"Loading people: {args.input}")
    try:
        people = load_people(args.input)
    except DataLoadError as e:
        logger.error("Failed to load %s: %s", args.input, e)
        return 1
    print(f"  Found {len(people)} people")

    print("Indexing relationships...")
    index = build_index(people)
    G = build_graph(index)
    print(f"  Graph has {G.number_of_nodes()} nodes and {G.number_of_edges()} edges")

    print("Validating data...")
    warnings = validate_people(index, G)
    if warnings:
        print(f"  Found {len(warnings)} validation warnings:")
        for w in warnings[:10]:
            print(f"    - {w}")
        if len(warnings) > 10:
            print(f"    ... and {len(warnings) - 10} more")
    else:
        print("  No validation issues found")

    print("Computing layout...")
    layout = compute_layout(people, index, config)
    connectors = derive_connectors(layout, index, config)
    print(f"  {len(layout.roots)} root trees, {len(layout.positions)} cards, {len(connectors)} connectors")

    if args.dot:
        write_dot(build_dot(layout, connectors, index, config), args.dot)

    photo_root = args.input.parent

    if args.output is None:
        TreeViewer(layout, connectors, index, G, config, photo_root).show()
        return 0

    highlight = None
    if args.focus is not None:
        focus_id = resolve_id(G, args.focus)
        if focus_id is None:
            logger.warning("Unknown focus id %s; nothing highlighted", args.focus)
        else:
            state = FocusState(G)
            state.focus(focus_id)
            highlight = state.highlight_flags(connectors)

    print(f"Plotting tree to: {args.output}")
    fig, _, _ = plot_tree(layout, connectors, index, config, highlight, photo_root)
    save_tree(fig, args.output)
    print("Done!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
