"""Relationship index, NetworkX graph building and lineage lookup."""

from dataclasses import dataclass, field

import networkx as nx

from models import LayoutConfig, Person, PersonId, placeholder_person


@dataclass
class RelationshipIndex:
    people: dict[PersonId, Person] = field(default_factory=dict)
    order: dict[PersonId, int] = field(default_factory=dict)
    non_roots: set[PersonId] = field(default_factory=set)
    children_of: dict[PersonId, list[PersonId]] = field(default_factory=dict)
    parents_of: dict[PersonId, list[PersonId]] = field(default_factory=dict)

    def lookup(self, pid: PersonId, config: LayoutConfig | None = None) -> Person:
        """Return the record for pid, or a placeholder for unknown ids."""
        person = self.people.get(pid)
        if person is None:
            return placeholder_person(pid, config)
        return person

    def family_children(self, pid: PersonId, spouse: PersonId | None = None) -> list[PersonId]:
        """Ordered union of the children recorded on pid and on spouse."""
        children = list(self.children_of.get(pid, []))
        if spouse is not None:
            children.extend(self.children_of.get(spouse, []))
        return list(dict.fromkeys(children))


def build_index(people: list[Person]) -> RelationshipIndex:
    """Derive lookup maps from the flat list of person records."""
    index = RelationshipIndex()

    for i, person in enumerate(people):
        index.people[person.id] = person
        index.order.setdefault(person.id, i)

    # Iterate the deduplicated records so a repeated id does not double its edges
    for person in index.people.values():
        if not person.children:
            continue
        children = list(dict.fromkeys(person.children))
        index.children_of[person.id] = children
        for child_id in children:
            index.non_roots.add(child_id)
            index.parents_of.setdefault(child_id, []).append(person.id)

    return index


def build_graph(index: RelationshipIndex) -> nx.DiGraph:
    """Build a NetworkX directed graph from the relationship index."""
    G = nx.DiGraph()

    # Note: use 'person_name' instead of 'name' to avoid conflict with pydot
    for pid, person in index.people.items():
        G.add_node(
            pid,
            person_name=person.name,
            sex=person.sex,
            birth=person.birth,
            death=person.death,
        )

    for parent, children in index.children_of.items():
        for child in children:
            G.add_edge(parent, child, relationship_type="PARENT_OF")

    for pid, person in index.people.items():
        spouse = person.spouse
        if spouse is None or spouse == pid or spouse not in index.people:
            continue
        # A parent-child edge between the same pair takes precedence
        if not G.has_edge(pid, spouse):
            G.add_edge(pid, spouse, relationship_type="SPOUSE_OF")

    return G


def parent_child_view(G: nx.DiGraph) -> nx.DiGraph:
    """Read-only view of G restricted to PARENT_OF edges."""
    return nx.subgraph_view(
        G,
        filter_edge=lambda u, v: G.edges[u, v].get("relationship_type") == "PARENT_OF",
    )


def get_lineage_ids(G: nx.DiGraph, center_id: PersonId) -> set[PersonId]:
    """
    Collect every ancestor and descendant of center_id, plus center_id itself.

    Only PARENT_OF edges are followed, so spouses of ancestors are not part
    of the lineage unless they are ancestors themselves. The traversal keeps
    a visited set, which makes it safe on cyclic data.

    Args:
        G: Graph built by build_graph
        center_id: The focal person

    Returns:
        The set of ids in the lineage of center_id
    """
    if center_id not in G:
        return {center_id}

    tree = parent_child_view(G)
    lineage = {center_id}
    lineage.update(nx.ancestors(tree, center_id))
    lineage.update(nx.descendants(tree, center_id))
    return lineage
