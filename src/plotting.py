"""Drawing of positioned family trees: matplotlib figures and Graphviz export."""

from pathlib import Path
import logging

import matplotlib.image as mpimg
import matplotlib.pyplot as plt
from matplotlib.patches import FancyBboxPatch, PathPatch, Rectangle
from matplotlib.path import Path as MplPath
import networkx as nx
import pydot

from graph import RelationshipIndex
from interaction import FocusState
from layout import ForestLayout
from models import CHILD_PATH, SPOUSE_LINE, Connector, LayoutConfig, Person, PersonId

logger = logging.getLogger(__name__)

CARD_FILL = "#ffffff"
CARD_EDGE = {"M": "#3b6ea5", "F": "#b5487a"}
DEFAULT_EDGE = "#444444"
SPOUSE_COLOR = "#888888"
LINE_COLOR = "#000000"
HIGHLIGHT_COLOR = "#d9534f"
PLACEHOLDER_PHOTO = "#dddddd"

# Diagram units per inch of figure
UNITS_PER_INCH = 100


def connector_patch(connector: Connector, highlighted: bool = False) -> PathPatch:
    """matplotlib patch for a connector; child paths get a quadratic joint."""
    if connector.kind == CHILD_PATH:
        start, joint, control, after, end = connector.points
        verts = [start, joint, control, after, end]
        codes = [MplPath.MOVETO, MplPath.LINETO, MplPath.CURVE3, MplPath.CURVE3, MplPath.LINETO]
    else:
        verts = [connector.start, connector.end]
        codes = [MplPath.MOVETO, MplPath.LINETO]

    patch = PathPatch(
        MplPath(verts, codes),
        fill=False,
        capstyle="round",
        joinstyle="round",
        zorder=1,
    )
    style_connector(patch, connector, highlighted)
    return patch


def style_connector(patch: PathPatch, connector: Connector, highlighted: bool):
    if highlighted:
        patch.set_edgecolor(HIGHLIGHT_COLOR)
        patch.set_linewidth(2.5)
    elif connector.kind == SPOUSE_LINE:
        patch.set_edgecolor(SPOUSE_COLOR)
        patch.set_linewidth(1.5)
    else:
        patch.set_edgecolor(LINE_COLOR)
        patch.set_linewidth(1.2)


def _photo_file(person: Person, config: LayoutConfig, photo_root: Path | None) -> Path | None:
    ref = person.photo or config.default_photo
    path = Path(ref)
    if not path.is_absolute() and photo_root is not None:
        path = photo_root / path
    return path if path.is_file() else None


def _read_photo(person: Person, config: LayoutConfig, photo_root: Path | None):
    """Image array for the card, or None when there is no readable photo."""
    photo = _photo_file(person, config, photo_root)
    if photo is None:
        return None
    try:
        return mpimg.imread(photo)
    except (OSError, ValueError) as e:
        # Pillow's UnidentifiedImageError is an OSError
        logger.warning("Cannot read photo %s for %s: %s", photo, person.id, e)
        return None


def draw_card(ax, person: Person, x: float, y: float, config: LayoutConfig, photo_root: Path | None = None):
    """Rounded card with photo, name and life span."""
    w, h = config.card_width, config.card_height
    ax.add_patch(
        FancyBboxPatch(
            (x, y),
            w,
            h,
            boxstyle="round,pad=0,rounding_size=8",
            facecolor=CARD_FILL,
            edgecolor=CARD_EDGE.get(person.sex, DEFAULT_EDGE),
            linewidth=1,
            zorder=2,
        )
    )

    size = config.photo_size
    px, py = x + (w - size) / 2, y + 15
    image = _read_photo(person, config, photo_root)
    if image is not None:
        # Extent is (left, right, bottom, top); the y axis is inverted
        ax.imshow(image, extent=(px, px + size, py + size, py), zorder=3)
    else:
        ax.add_patch(Rectangle((px, py), size, size, facecolor=PLACEHOLDER_PHOTO, edgecolor="none", zorder=3))

    ax.text(x + w / 2, y + 115, person.name, ha="center", va="center", fontsize=9, fontweight="bold", zorder=4)
    ax.text(x + w / 2, y + 145, person.life_span, ha="center", va="center", fontsize=7, color="#555555", zorder=4)


def _card_at(layout: ForestLayout, config: LayoutConfig, x: float, y: float) -> PersonId | None:
    for pid, pos in layout.positions.items():
        if pos.x <= x <= pos.x + config.card_width and pos.y <= y <= pos.y + config.card_height:
            return pid
    return None


def plot_tree(
    layout: ForestLayout,
    connectors: list[Connector],
    index: RelationshipIndex,
    config: LayoutConfig | None = None,
    highlight: list[bool] | None = None,
    photo_root: Path | None = None,
):
    """
    Draw every card and connector onto a new figure.

    Args:
        layout: Positions from compute_layout
        connectors: Geometry from derive_connectors
        index: Used to look up the record (or placeholder) behind each card
        config: Card sizes; must match the one used for the layout
        highlight: Optional flag per connector, True draws it in the accent colour
        photo_root: Directory that relative photo references are resolved against

    Returns:
        (figure, axes, connector patches in the order of connectors)
    """
    if config is None:
        config = LayoutConfig()
    if highlight is None:
        highlight = [False] * len(connectors)

    min_x, min_y, max_x, max_y = layout.bounds(config)
    pad = config.horizontal_gap
    width = max(max_x - min_x + 2 * pad, 1)
    height = max(max_y - min_y + 2 * pad, 1)

    fig, ax = plt.subplots(figsize=(width / UNITS_PER_INCH, height / UNITS_PER_INCH))
    ax.set_xlim(min_x - pad, max_x + pad)
    ax.set_ylim(max_y + pad, min_y - pad)  # diagram y grows downward
    ax.set_aspect("equal")
    ax.axis("off")

    patches = []
    for connector, flag in zip(connectors, highlight):
        patch = connector_patch(connector, flag)
        ax.add_patch(patch)
        patches.append(patch)

    for pid, pos in layout.positions.items():
        draw_card(ax, index.lookup(pid, config), pos.x, pos.y, config, photo_root)

    return fig, ax, patches


def save_tree(fig, output_path: Path):
    """Save the figure; the format follows the file extension (png, svg or pdf)."""
    output_path = Path(output_path)
    ext = output_path.suffix.lower().lstrip(".")
    if ext not in ("png", "svg", "pdf"):
        ext = "png"
    fig.savefig(output_path, format=ext, dpi=150, bbox_inches="tight")
    plt.close(fig)
    print(f"Tree saved to {output_path}")


class TreeViewer:
    """
    Interactive window: hover a card to highlight its lineage, scroll to
    zoom, drag with the toolbar to pan, press 'r' to reset the view.
    """

    def __init__(
        self,
        layout: ForestLayout,
        connectors: list[Connector],
        index: RelationshipIndex,
        G: nx.DiGraph,
        config: LayoutConfig | None = None,
        photo_root: Path | None = None,
    ):
        self.layout = layout
        self.connectors = connectors
        self.config = config or LayoutConfig()
        self.state = FocusState(G)
        self.fig, self.ax, self.patches = plot_tree(
            layout, connectors, index, self.config, photo_root=photo_root
        )
        self.home = (self.ax.get_xlim(), self.ax.get_ylim())

        canvas = self.fig.canvas
        canvas.mpl_connect("motion_notify_event", self.on_move)
        canvas.mpl_connect("axes_leave_event", self.on_leave)
        canvas.mpl_connect("scroll_event", self.on_scroll)
        canvas.mpl_connect("key_press_event", self.on_key)

    def refresh(self):
        flags = self.state.highlight_flags(self.connectors)
        for patch, connector, flag in zip(self.patches, self.connectors, flags):
            style_connector(patch, connector, flag)
        self.fig.canvas.draw_idle()

    def on_move(self, event):
        if event.inaxes is not self.ax or event.xdata is None:
            return
        pid = _card_at(self.layout, self.config, event.xdata, event.ydata)
        changed = self.state.clear() if pid is None else self.state.focus(pid)
        if changed:
            self.refresh()

    def on_leave(self, event):
        if self.state.clear():
            self.refresh()

    def on_scroll(self, event):
        if event.inaxes is not self.ax or event.xdata is None:
            return
        scale = 1 / 1.2 if event.button == "up" else 1.2
        x0, x1 = self.ax.get_xlim()
        y0, y1 = self.ax.get_ylim()
        cx, cy = event.xdata, event.ydata
        self.ax.set_xlim(cx - (cx - x0) * scale, cx + (x1 - cx) * scale)
        self.ax.set_ylim(cy - (cy - y0) * scale, cy + (y1 - cy) * scale)
        self.fig.canvas.draw_idle()

    def on_key(self, event):
        if event.key == "r":
            self.reset_view()

    def reset_view(self):
        xlim, ylim = self.home
        self.ax.set_xlim(xlim)
        self.ax.set_ylim(ylim)
        self.fig.canvas.draw_idle()

    def show(self):
        plt.show()


def build_dot(
    layout: ForestLayout,
    connectors: list[Connector],
    index: RelationshipIndex,
    config: LayoutConfig | None = None,
) -> pydot.Dot:
    """
    Graphviz graph with every card pinned at its computed position.

    Render with `neato -n2`, which keeps the given coordinates. Graphviz
    uses points with y growing upward, so y is flipped.
    """
    if config is None:
        config = LayoutConfig()

    P = pydot.Dot(graph_type="graph")
    P.set("splines", "line")
    P.set("outputorder", "edgesfirst")

    w, h = config.card_width, config.card_height
    for pid, pos in layout.positions.items():
        person = index.lookup(pid, config)
        label = person.name if not person.life_span else f"{person.name}\n{person.life_span}"
        P.add_node(
            pydot.Node(
                str(pid),
                label=label,
                shape="box",
                style="rounded,filled",
                fillcolor="white",
                color=CARD_EDGE.get(person.sex, DEFAULT_EDGE),
                width=f"{w / 72:.3f}",
                height=f"{h / 72:.3f}",
                fixedsize="true",
                pos=f"{pos.x + w / 2:g},{-(pos.y + h / 2):g}!",
            )
        )

    for connector in connectors:
        if connector.kind == SPOUSE_LINE:
            P.add_edge(pydot.Edge(str(connector.source), str(connector.target), color=SPOUSE_COLOR))
        elif connector.kind == CHILD_PATH:
            P.add_edge(pydot.Edge(str(connector.source), str(connector.target), color=LINE_COLOR))

    return P


def write_dot(P: pydot.Dot, output_path: Path):
    output_path = Path(output_path)
    output_path.write_text(P.to_string(), encoding="utf-8")
    print(f"DOT graph saved to {output_path}")
