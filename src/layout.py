"""Root selection and forest layout: one (x, y) position per reachable person."""

from dataclasses import dataclass, field
import logging

from graph import RelationshipIndex, build_index
from models import LayoutConfig, Person, PersonId, Position

logger = logging.getLogger(__name__)


@dataclass
class ForestLayout:
    roots: list[PersonId]
    positions: dict[PersonId, Position] = field(default_factory=dict)
    depths: dict[PersonId, int] = field(default_factory=dict)

    def bounds(self, config: LayoutConfig) -> tuple[float, float, float, float]:
        """(min_x, min_y, max_x, max_y) covered by the placed cards."""
        if not self.positions:
            return (0.0, 0.0, 0.0, 0.0)
        xs = [p.x for p in self.positions.values()]
        ys = [p.y for p in self.positions.values()]
        return (
            min(xs),
            min(ys),
            max(xs) + config.card_width,
            max(ys) + config.card_height,
        )


def select_roots(people: list[Person], index: RelationshipIndex) -> list[PersonId]:
    """
    Pick one root per disjoint family group.

    A person is a candidate when nobody lists them as a child. When two
    candidates are married to each other, only the one appearing first in
    the input becomes a root; the other is laid out beside them.
    """
    candidates = [p.id for p in people if p.id not in index.non_roots]
    candidate_set = set(candidates)

    roots: list[PersonId] = []
    claimed: set[PersonId] = set()

    for pid in candidates:
        if pid in claimed:
            continue

        spouse = index.people[pid].spouse
        if spouse is not None and spouse != pid and spouse in candidate_set and spouse not in claimed:
            root = pid if index.order[pid] <= index.order[spouse] else spouse
            claimed.update((pid, spouse))
        else:
            root = pid
            claimed.add(pid)

        roots.append(root)

    return roots


class _LayoutPass:
    """State owned by a single layout computation."""

    def __init__(self, index: RelationshipIndex, config: LayoutConfig):
        self.index = index
        self.config = config
        self.positions: dict[PersonId, Position] = {}
        self.depths: dict[PersonId, int] = {}
        # depth -> next free x on that row
        self.row_widths: dict[int, float] = {}
        self.origin = config.margin

    def layout_root(self, root: PersonId, start_x: float):
        self.origin = start_x
        self.place(root, 0, start_x)

    def next_tree_start(self, current: float) -> float:
        if not self.row_widths:
            return current
        return max(self.row_widths.values()) + self.config.tree_gap

    def place(self, pid: PersonId, depth: int, offset: float):
        """
        Place pid and everything below it, depth first.

        Uses an explicit stack so long lineages do not hit the recursion
        limit. A person's row is claimed only after their whole subtree is
        placed, which is what the pending "claim" entries are for.
        """
        stack: list[tuple] = [("place", pid, depth, offset)]
        while stack:
            entry = stack.pop()
            if entry[0] == "claim":
                _, claim_depth, right = entry
                self._claim(claim_depth, right)
                continue

            _, pid, depth, offset = entry
            if pid in self.positions:
                continue

            right, children, child_offset = self._visit(pid, depth, offset)
            stack.append(("claim", depth, right))
            for child in reversed(children):
                stack.append(("place", child, depth + 1, child_offset))

    def _visit(self, pid: PersonId, depth: int, offset: float) -> tuple[float, list[PersonId], float]:
        """Position pid (and spouse); return its row claim and the children to place."""
        cfg = self.config
        x = max(self.row_widths.get(depth, offset), offset)
        y = depth * cfg.row_height
        self._set(pid, depth, x, y)

        person = self.index.people.get(pid)
        if person is None:
            logger.debug("Placing unknown id %r as a placeholder", pid)
            return x + cfg.card_width + cfg.horizontal_gap, [], offset

        spouse = person.spouse
        paired = False
        if spouse is not None and spouse in self.index.people and spouse not in self.positions:
            self._set(spouse, depth, x + cfg.card_width + cfg.horizontal_gap, y)
            paired = True

        children = self.index.family_children(pid, spouse if paired else None)
        child_offset = offset
        if children:
            if paired:
                center = x + (cfg.couple_width / 2)
            else:
                center = x + cfg.card_width / 2
            block = len(children) * cfg.card_width + (len(children) - 1) * cfg.horizontal_gap
            child_offset = max(center - block / 2, self.origin)

        footprint = cfg.couple_width if spouse is not None else cfg.card_width
        return x + footprint + cfg.horizontal_gap, children, child_offset

    def _set(self, pid: PersonId, depth: int, x: float, y: float):
        self.positions[pid] = Position(x, y)
        self.depths[pid] = depth

    def _claim(self, depth: int, right: float):
        self.row_widths[depth] = max(self.row_widths.get(depth, right), right)


def compute_layout(
    people: list[Person],
    index: RelationshipIndex | None = None,
    config: LayoutConfig | None = None,
) -> ForestLayout:
    """
    Assign a position to every person reachable from a root.

    Each root tree is packed left to right, one row per generation. Sibling
    subtrees never overlap because every placement starts at or beyond the
    row's ledger entry, and a root tree starts past the widest row of the
    trees before it.

    Args:
        people: Person records in input order
        index: Prebuilt relationship index (built from people if omitted)
        config: Card sizes and gaps

    Returns:
        A ForestLayout with the roots, positions and depths
    """
    if index is None:
        index = build_index(people)
    if config is None:
        config = LayoutConfig()

    roots = select_roots(people, index)
    layout_pass = _LayoutPass(index, config)

    start_x = config.margin
    for root in roots:
        layout_pass.layout_root(root, start_x)
        start_x = layout_pass.next_tree_start(start_x)

    unplaced = len(index.people.keys() - layout_pass.positions.keys())
    if unplaced:
        logger.info("%d people are not reachable from any root", unplaced)

    return ForestLayout(
        roots=roots,
        positions=layout_pass.positions,
        depths=layout_pass.depths,
    )
