"""Data checks for person records before layout."""

import networkx as nx

from graph import RelationshipIndex, parent_child_view
from parsing import parse_date_string


def validate_people(index: RelationshipIndex, G: nx.DiGraph) -> list[str]:
    """
    Validate the person records for:
    - Cycles in parent-child relationships
    - Children and spouses that are referenced but never defined
    - Spouse declarations that are not returned
    - Children with more than two recorded parents
    - Impossible dates (child born before parent, death before birth)

    None of these stop the render; the result is a list of warning messages.
    """
    warnings: list[str] = []
    people = index.people

    try:
        cycle = nx.find_cycle(parent_child_view(G), orientation="original")
        cycle_nodes = [edge[0] for edge in cycle]
        warnings.append(f"Cycle detected in parent-child relationships: {cycle_nodes}")
    except nx.NetworkXNoCycle:
        pass

    for pid, person in people.items():
        for child_id in person.children:
            if child_id not in people:
                warnings.append(f"{pid} lists unknown child {child_id!r}")

        spouse_id = person.spouse
        if spouse_id is None:
            continue
        spouse = people.get(spouse_id)
        if spouse is None:
            warnings.append(f"{pid} lists unknown spouse {spouse_id!r}")
        elif spouse.spouse != pid:
            warnings.append(
                f"{pid} lists {spouse_id} as spouse, but {spouse_id} lists {spouse.spouse!r}"
            )

    for child_id, parents in index.parents_of.items():
        if len(parents) > 2:
            warnings.append(f"{child_id} has {len(parents)} recorded parents: {parents}")

    # ISO dates compare correctly as strings
    births = {pid: parse_date_string(p.birth) for pid, p in people.items()}

    for parent_id, children in index.children_of.items():
        parent_birth = births.get(parent_id)
        if not parent_birth:
            continue
        for child_id in children:
            child_birth = births.get(child_id)
            if child_birth and child_birth < parent_birth:
                warnings.append(
                    f"Impossible: {people[child_id].name or child_id} born before parent "
                    f"{people[parent_id].name or parent_id}"
                )

    for pid, person in people.items():
        birth = births[pid]
        death = parse_date_string(person.death)
        if birth and death and death < birth:
            warnings.append(f"Impossible: {person.name or pid} died before being born")

    return warnings
