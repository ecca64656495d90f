"""Data classes for family tree entities and layout geometry."""

from dataclasses import dataclass

PersonId = int | str

SPOUSE_LINE = "spouse-line"
TRUNK_LINE = "trunk-line"
CHILD_PATH = "child-path"


@dataclass(frozen=True)
class Person:
    id: PersonId
    name: str = ""
    birth: str | None = None
    death: str | None = None
    photo: str | None = None
    spouse: PersonId | None = None
    children: tuple = ()
    sex: str | None = None  # M, F or None (only known for GEDCOM input)

    @property
    def life_span(self) -> str:
        birth = self.birth or ""
        death = self.death or ""
        sep = " - " if birth or death else ""
        return f"{birth}{sep}{death}"


@dataclass(frozen=True)
class Position:
    """Top-left corner of a card. y grows downward."""

    x: float
    y: float


@dataclass
class LayoutConfig:
    card_width: float = 150
    card_height: float = 170
    horizontal_gap: float = 60
    vertical_gap: float = 120
    margin: float = 50
    tree_gap_factor: float = 2
    trunk_drop: float = 20
    curve_radius: float = 12
    photo_size: float = 80
    default_photo: str = "Photos/Default.jpg"

    @property
    def row_height(self) -> float:
        return self.card_height + self.vertical_gap

    @property
    def tree_gap(self) -> float:
        return self.horizontal_gap * self.tree_gap_factor

    @property
    def couple_width(self) -> float:
        return self.card_width * 2 + self.horizontal_gap


@dataclass(frozen=True)
class Connector:
    kind: str  # SPOUSE_LINE, TRUNK_LINE or CHILD_PATH
    source: PersonId
    target: PersonId
    points: tuple
    partner: PersonId | None = None
    children: tuple = ()

    @property
    def start(self) -> tuple[float, float]:
        return self.points[0]

    @property
    def end(self) -> tuple[float, float]:
        return self.points[-1]

    @property
    def path(self) -> str:
        """SVG path description of the connector."""
        if self.kind == CHILD_PATH:
            start, joint, control, after, end = self.points
            return (
                f"M{_fmt(start)} L{_fmt(joint)} "
                f"Q{_fmt(control)} {_fmt(after)} L{_fmt(end)}"
            )
        return f"M{_fmt(self.start)} L{_fmt(self.end)}"


def _fmt(point: tuple[float, float]) -> str:
    return f"{point[0]:g},{point[1]:g}"


def placeholder_person(pid: PersonId, config: LayoutConfig | None = None) -> Person:
    """Stand-in record for an id that is referenced but never defined."""
    default_photo = (config or LayoutConfig()).default_photo
    return Person(id=pid, name=str(pid), photo=default_photo)
