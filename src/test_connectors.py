from collections import Counter

from connectors import derive_connectors, owns_couple
from graph import build_index
from layout import compute_layout
from models import CHILD_PATH, SPOUSE_LINE, TRUNK_LINE, LayoutConfig, Person


def connect(people, config=None):
    config = config or LayoutConfig()
    index = build_index(people)
    layout = compute_layout(people, index, config)
    return layout, derive_connectors(layout, index, config)


def kinds(connectors):
    return Counter(c.kind for c in connectors)


def test_couple_with_one_child():
    people = [
        Person(id="A", spouse="B", children=("C",)),
        Person(id="B", spouse="A"),
        Person(id="C"),
    ]
    _, connectors = connect(people)

    assert kinds(connectors) == {SPOUSE_LINE: 1, TRUNK_LINE: 1, CHILD_PATH: 1}
    spouse, trunk, path = connectors

    assert (spouse.source, spouse.target) == ("A", "B")
    assert spouse.points == ((125, 85), (335, 85))

    assert trunk.points == ((230, 85), (230, 190))
    assert trunk.partner == "B"
    assert trunk.children == ("C",)

    # Child directly below the branch point: straight joint
    assert (path.source, path.target) == ("A", "C")
    assert path.start == (230, 190)
    assert path.end == (230, 290)
    assert path.points[1] == (230, 190)


def test_disjoint_people_have_no_connectors():
    _, connectors = connect([Person(id="D"), Person(id="E")])

    assert connectors == []


def test_child_paths_turn_towards_each_child():
    people = [
        Person(id="P", children=("c1", "c2")),
        Person(id="c1"),
        Person(id="c2"),
    ]
    layout, connectors = connect(people)
    paths = {c.target: c for c in connectors if c.kind == CHILD_PATH}

    # P at x=50 (centre 125); c1 at 50, c2 at 260
    assert layout.positions["c2"].x == 260
    assert paths["c1"].points[1] == (125, 190)
    assert paths["c2"].points == (
        (125, 190),
        (323, 190),
        (335, 190),
        (335, 202),
        (335, 290),
    )
    assert paths["c2"].path == "M125,190 L323,190 Q335,190 335,202 L335,290"


def test_child_left_of_parent_curves_from_the_right():
    people = [
        Person(id="R", spouse="S", children=("x", "y")),
        Person(id="S", spouse="R"),
        Person(id="x"),
        Person(id="y"),
    ]
    layout, connectors = connect(people)
    paths = {c.target: c for c in connectors if c.kind == CHILD_PATH}

    # Couple midpoint at 230; x sits at 50 (centre 125), y at 260 (centre 335)
    assert layout.positions["x"].x == 50
    assert paths["x"].points[1] == (137, 190)
    assert paths["x"].points[3] == (125, 202)
    assert paths["y"].points[1] == (323, 190)


def test_symmetric_couple_drawn_once_by_smaller_id():
    people = [
        Person(id="b", spouse="a", children=("k",)),
        Person(id="a", spouse="b", children=("k",)),
        Person(id="k"),
    ]
    index = build_index(people)
    _, connectors = connect(people)

    assert owns_couple(index.people["a"], index)
    assert not owns_couple(index.people["b"], index)
    assert kinds(connectors) == {SPOUSE_LINE: 1, TRUNK_LINE: 1, CHILD_PATH: 1}
    assert all(c.source == "a" for c in connectors)


def test_numeric_ids_compare_as_strings():
    people = [
        Person(id=10, spouse=9),
        Person(id=9, spouse=10),
    ]
    _, connectors = connect(people)

    assert len(connectors) == 1
    assert connectors[0].source == 10


def test_one_sided_spouse_draws_union_children_once():
    people = [
        Person(id="A", spouse="B", children=("C",)),
        Person(id="B", children=("K",)),
        Person(id="C"),
        Person(id="K"),
    ]
    _, connectors = connect(people)
    targets = Counter(c.target for c in connectors if c.kind == CHILD_PATH)

    assert kinds(connectors)[SPOUSE_LINE] == 1
    assert kinds(connectors)[TRUNK_LINE] == 1
    assert targets == {"C": 1, "K": 1}


def test_connector_counts_match_families():
    people = [
        Person(id="R1", spouse="S1", children=("a", "b")),
        Person(id="S1", spouse="R1"),
        Person(id="a", spouse="a2", children=("a_1",)),
        Person(id="a2", spouse="a"),
        Person(id="b"),
        Person(id="a_1"),
        Person(id="R2", children=("d",)),
        Person(id="d"),
        Person(id="lonely", spouse="other"),
        Person(id="other", spouse="lonely"),
    ]
    _, connectors = connect(people)

    # Couples: R1+S1, a+a2, lonely+other. Parents with children: R1+S1, a+a2, R2
    assert kinds(connectors) == {SPOUSE_LINE: 3, TRUNK_LINE: 3, CHILD_PATH: 4}


def test_dangling_child_gets_a_path():
    _, connectors = connect([Person(id="A", children=("Z",))])

    assert [c.kind for c in connectors] == [TRUNK_LINE, CHILD_PATH]
    assert connectors[1].target == "Z"


def test_trunk_only_with_placed_children():
    people = [Person(id="A", spouse="B"), Person(id="B", spouse="A")]
    _, connectors = connect(people)

    assert kinds(connectors) == {SPOUSE_LINE: 1}
