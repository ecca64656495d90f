from types import SimpleNamespace

import matplotlib.colors as mcolors
import matplotlib.pyplot as plt
from matplotlib.path import Path as MplPath
import numpy as np

from connectors import derive_connectors
from graph import build_graph, build_index
from layout import compute_layout
from models import LayoutConfig, Person
from plotting import (
    HIGHLIGHT_COLOR,
    PLACEHOLDER_PHOTO,
    TreeViewer,
    build_dot,
    connector_patch,
    plot_tree,
    save_tree,
)


def scene():
    people = [
        Person(id="A", name="Alice", birth="1900", spouse="B", children=("C",), sex="F"),
        Person(id="B", name="Bob", spouse="A"),
        Person(id="C", name="Carl", children=("Z",)),
    ]
    index = build_index(people)
    layout = compute_layout(people, index)
    return index, layout, derive_connectors(layout, index)


def test_child_path_patch_has_curved_joint():
    _, _, connectors = scene()
    path = next(c for c in connectors if c.kind == "child-path")

    patch = connector_patch(path)

    assert list(patch.get_path().codes).count(MplPath.CURVE3) == 2


def test_plot_tree_draws_cards_and_connectors(tmp_path):
    index, layout, connectors = scene()

    fig, ax, patches = plot_tree(layout, connectors, index, highlight=[True] + [False] * (len(connectors) - 1))

    assert len(patches) == len(connectors)
    assert patches[0].get_edgecolor() == mcolors.to_rgba(HIGHLIGHT_COLOR)
    texts = [t.get_text() for t in ax.texts]
    # Placeholder card for the dangling child
    assert "Z" in texts
    assert "Alice" in texts
    assert "1900 - " in texts

    output = tmp_path / "tree.png"
    save_tree(fig, output)
    assert output.exists()


def test_photo_is_drawn_when_file_exists(tmp_path):
    photo = tmp_path / "alice.png"
    plt.imsave(photo, np.array([[0.0, 1.0], [1.0, 0.0]]))
    people = [Person(id="A", name="Alice", photo="alice.png")]
    index = build_index(people)
    layout = compute_layout(people, index)

    fig, ax, _ = plot_tree(layout, [], index, photo_root=tmp_path)

    assert len(ax.images) == 1
    plt.close(fig)


def test_viewer_hover_highlights_lineage():
    index, layout, connectors = scene()
    viewer = TreeViewer(layout, connectors, index, build_graph(index))
    highlight = mcolors.to_rgba(HIGHLIGHT_COLOR)

    z = layout.positions["Z"]
    viewer.on_move(SimpleNamespace(inaxes=viewer.ax, xdata=z.x + 10, ydata=z.y + 10))

    assert viewer.state.focused == "Z"
    lit = [p.get_edgecolor() == highlight for p in viewer.patches]
    # Everything except the A-B spouse line leads to Z
    assert lit.count(False) == 1

    viewer.on_leave(SimpleNamespace())
    assert viewer.state.focused is None
    assert not any(p.get_edgecolor() == highlight for p in viewer.patches)
    plt.close(viewer.fig)


def test_viewer_zoom_and_reset():
    index, layout, connectors = scene()
    viewer = TreeViewer(layout, connectors, index, build_graph(index))
    home = viewer.ax.get_xlim()

    viewer.on_scroll(SimpleNamespace(inaxes=viewer.ax, xdata=200, ydata=100, button="up"))
    assert viewer.ax.get_xlim() != home

    viewer.on_key(SimpleNamespace(key="r"))
    assert viewer.ax.get_xlim() == home
    plt.close(viewer.fig)


def test_build_dot_pins_positions():
    index, layout, connectors = scene()

    dot = build_dot(layout, connectors, index).to_string()

    assert "pos=" in dot
    assert "125,-85!" in dot  # A's card centre, y flipped
    assert dot.count("--") == 3  # one spouse line, two child paths


def test_unreadable_photo_falls_back_to_placeholder(tmp_path):
    (tmp_path / "notes.txt").write_text("not an image", encoding="utf-8")
    people = [Person(id="A", name="Alice", photo="notes.txt")]
    index = build_index(people)
    layout = compute_layout(people, index)

    fig, ax, _ = plot_tree(layout, [], index, photo_root=tmp_path)

    assert len(ax.images) == 0
    assert any(p.get_facecolor() == mcolors.to_rgba(PLACEHOLDER_PHOTO) for p in ax.patches)
    plt.close(fig)


def test_placeholder_card_uses_configured_default_photo(tmp_path):
    plt.imsave(tmp_path / "unknown.png", np.array([[0.0, 1.0], [1.0, 0.0]]))
    people = [Person(id="A", name="Alice", children=("Z",))]
    index = build_index(people)
    config = LayoutConfig(default_photo="unknown.png")
    layout = compute_layout(people, index, config)

    fig, ax, _ = plot_tree(layout, [], index, config, photo_root=tmp_path)

    # Alice has no photo either, so both cards show the configured default
    assert len(ax.images) == 2
    plt.close(fig)
