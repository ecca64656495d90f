"""Connector geometry derived from a finished layout."""

from graph import RelationshipIndex
from layout import ForestLayout
from models import (
    CHILD_PATH,
    SPOUSE_LINE,
    TRUNK_LINE,
    Connector,
    LayoutConfig,
    Person,
    PersonId,
)


def owns_couple(person: Person, index: RelationshipIndex) -> bool:
    """
    Decide which partner draws the shared connectors of a couple.

    When both records name each other, the partner with the smaller id (by
    string comparison) owns the couple. A one-sided declaration is always
    owned by the declaring person.
    """
    spouse = index.people.get(person.spouse)
    if spouse is None or spouse.spouse != person.id:
        return True
    a, b = sorted([person.id, spouse.id], key=str)
    return person.id == a


def find_couples(layout: ForestLayout, index: RelationshipIndex) -> dict[PersonId, PersonId]:
    """Map each couple owner to their partner, for spouses placed on the same row."""
    positions = layout.positions
    couples: dict[PersonId, PersonId] = {}

    for pid, person in index.people.items():
        spouse_id = person.spouse
        if spouse_id is None or spouse_id == pid:
            continue
        pos = positions.get(pid)
        spouse_pos = positions.get(spouse_id)
        if pos is None or spouse_pos is None or pos.y != spouse_pos.y:
            continue
        if owns_couple(person, index):
            couples[pid] = spouse_id

    return couples


def child_path(
    parent_x: float,
    branch_y: float,
    child_x: float,
    child_y: float,
    radius: float,
) -> tuple:
    """Points of a branch: horizontal run, quarter turn, then down to the card."""
    if child_x < parent_x:
        joint_x = child_x + radius
    elif child_x > parent_x:
        joint_x = child_x - radius
    else:
        joint_x = child_x
    return (
        (parent_x, branch_y),
        (joint_x, branch_y),
        (child_x, branch_y),
        (child_x, branch_y + radius),
        (child_x, child_y),
    )


def derive_connectors(
    layout: ForestLayout,
    index: RelationshipIndex,
    config: LayoutConfig | None = None,
) -> list[Connector]:
    """
    Build spouse lines, trunk lines and child paths for every placed person.

    Couple connectors are emitted once, by the owning partner (see
    owns_couple). A couple's trunk feeds the children recorded on either
    partner. Each person's children hang from exactly one trunk: the first
    couple or single parent that claims them.
    """
    if config is None:
        config = LayoutConfig()

    positions = layout.positions
    half_w = config.card_width / 2
    half_h = config.card_height / 2

    couples = find_couples(layout, index)
    partners = set(couples.values())
    claimed: set[PersonId] = set()
    connectors: list[Connector] = []

    for pid in index.people:
        pos = positions.get(pid)
        if pos is None:
            continue

        center_x = pos.x + half_w
        mid_y = pos.y + half_h
        partner = couples.get(pid)

        if partner is not None:
            spouse_center = positions[partner].x + half_w
            connectors.append(
                Connector(
                    kind=SPOUSE_LINE,
                    source=pid,
                    target=partner,
                    points=((center_x, mid_y), (spouse_center, mid_y)),
                )
            )
            parent_x = (center_x + spouse_center) / 2
            sources = [pid, partner]
        elif pid in partners:
            # Drawn by the owning partner
            continue
        else:
            parent_x = center_x
            sources = [pid]

        sources = [s for s in sources if s not in claimed]
        claimed.update(sources)
        children = dict.fromkeys(c for s in sources for c in index.children_of.get(s, []))
        placed = [c for c in children if c in positions]
        if not placed:
            continue

        branch_y = mid_y + half_h + config.trunk_drop
        connectors.append(
            Connector(
                kind=TRUNK_LINE,
                source=pid,
                target=partner if partner is not None else pid,
                points=((parent_x, mid_y), (parent_x, branch_y)),
                partner=partner,
                children=tuple(placed),
            )
        )

        for child in placed:
            child_pos = positions[child]
            connectors.append(
                Connector(
                    kind=CHILD_PATH,
                    source=pid,
                    target=child,
                    points=child_path(
                        parent_x,
                        branch_y,
                        child_pos.x + half_w,
                        child_pos.y,
                        config.curve_radius,
                    ),
                    partner=partner,
                )
            )

    return connectors
