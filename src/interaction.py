"""Hover focus state and connector highlighting."""

import networkx as nx

from graph import get_lineage_ids
from models import CHILD_PATH, SPOUSE_LINE, TRUNK_LINE, Connector, PersonId


def is_highlighted(connector: Connector, lineage: set[PersonId]) -> bool:
    """True when the connector joins two members of the lineage."""
    parents = {connector.source}
    if connector.partner is not None:
        parents.add(connector.partner)
    parent_in = bool(parents & lineage)

    if connector.kind == SPOUSE_LINE:
        return connector.source in lineage and connector.target in lineage
    if connector.kind == TRUNK_LINE:
        return parent_in and any(c in lineage for c in connector.children)
    if connector.kind == CHILD_PATH:
        return parent_in and connector.target in lineage
    return False


class FocusState:
    """
    The only interaction state: which card, if any, is under the pointer.

    The lineage is recomputed every time it is needed, so repeated focus and
    clear calls never accumulate anything.
    """

    def __init__(self, G: nx.DiGraph):
        self.G = G
        self.focused: PersonId | None = None

    def focus(self, pid: PersonId) -> bool:
        """Focus pid. Returns True if the focus changed."""
        changed = self.focused != pid
        self.focused = pid
        return changed

    def clear(self) -> bool:
        changed = self.focused is not None
        self.focused = None
        return changed

    def lineage(self) -> set[PersonId]:
        if self.focused is None:
            return set()
        return get_lineage_ids(self.G, self.focused)

    def highlight_flags(self, connectors: list[Connector]) -> list[bool]:
        lineage = self.lineage()
        if not lineage:
            return [False] * len(connectors)
        return [is_highlighted(c, lineage) for c in connectors]
