"""GEDCOM input and date handling utilities."""

from pathlib import Path
import logging
import re

from ged4py import GedcomReader
from ged4py.parser import ParserError

from loader import DataLoadError
from models import Person

logger = logging.getLogger(__name__)

MONTHS = {
    "JAN": 1,
    "FEB": 2,
    "MAR": 3,
    "APR": 4,
    "MAY": 5,
    "JUN": 6,
    "JUL": 7,
    "AUG": 8,
    "SEP": 9,
    "OCT": 10,
    "NOV": 11,
    "DEC": 12,
}

# Qualifiers (ABT, BEF, AFT, EST, CAL, AROUND, ...) with optional colon
QUALIFIER_RE = re.compile(
    r"^(ABT\.?|ABOUT|BEF\.?|BEFORE|AFT\.?|AFTER|EST\.?|CAL\.?|FROM|TO|BET\.?|AND|CIRCA|CA\.?|AROUND):?\s*",
    re.IGNORECASE,
)


def _month(name: str) -> int | None:
    """Month number from a full or abbreviated English month name."""
    return MONTHS.get(name.upper().rstrip(".")[:3])


# Each pattern maps its groups onto (year, month, day) in that order
DATE_PATTERNS = [
    # "1839-08-29", "1746-00-00"
    (re.compile(r"^(\d{4})-(\d{2})-(\d{2})$"), lambda m: (m[1], m[2], m[3])),
    # "25 NOV 1954", "11 Aug. 1968", "02 May1838"
    (re.compile(r"^(\d{1,2})\s+([A-Za-z]+)\.?\s*(\d{4})$"), lambda m: (m[3], _month(m[2]), m[1])),
    # "NOV 1954", "May, 1837"
    (re.compile(r"^([A-Za-z]+)\.?,?\s*(\d{4})$"), lambda m: (m[2], _month(m[1]), 1)),
    # "1698"
    (re.compile(r"^(\d{4})$"), lambda m: (m[1], 1, 1)),
    # "01-27-1920", "1/15/1957", "04 05 1911" (month first)
    (re.compile(r"^(\d{1,2})[-/\s]+(\d{1,2})[-/\s]+(\d{4})$"), lambda m: (m[3], m[1], m[2])),
    # "April 17, 1850", "SEPT. 17,1910", "Oct.12,1929"
    (re.compile(r"^([A-Za-z]+)\.?\s*(\d{1,2}),?\s*(\d{4})$"), lambda m: (m[3], _month(m[1]), m[2])),
]


def parse_date_string(date_str: str | None) -> str | None:
    """
    Parse a free-form genealogy date into ISO format (YYYY-MM-DD).
    Missing month or day default to 01. Returns None if the date cannot be parsed.

    Handles formats like "25 NOV 1954", "ABOUT 1905", "(05/15/1923)",
    "(SEPT. 17,1910)" and "(1789?)".
    """
    if not date_str:
        return None

    s = date_str.strip().strip("()").rstrip("?")
    s = QUALIFIER_RE.sub("", s).strip()
    if not s:
        return None

    for pattern, parts in DATE_PATTERNS:
        match = pattern.match(s)
        if not match:
            continue
        year, month, day = parts(match)
        if month is None:
            continue
        year, month, day = int(year), int(month) or 1, int(day) or 1
        if 1 <= month <= 12 and 1 <= day <= 31:
            return f"{year:04d}-{month:02d}-{day:02d}"

    return None


def extract_numeric_id(xref_id: str) -> int:
    """Extract numeric part from GEDCOM xref_id like '@I_347421849@' or 'I674624289'."""
    digits = re.sub(r"[^0-9]", "", xref_id)
    if not digits:
        raise ValueError(f"No numeric ID found in: {xref_id}")
    return int(digits)


def extract_name(indi) -> str:
    """Display name of an individual record."""
    name_rec = indi.sub_tag("NAME")
    if name_rec is None or name_rec.value is None:
        return ""

    # ged4py returns NAME as tuple: (given, surname, suffix)
    if isinstance(name_rec.value, tuple):
        return " ".join(p for p in name_rec.value if p)

    return str(name_rec.value).replace("/", "").strip()


def extract_event_date(indi, tag: str) -> str | None:
    """Date of an event tag (BIRT, DEAT) as written in the file."""
    event = indi.sub_tag(tag)
    if event is None:
        return None
    date_rec = event.sub_tag("DATE")
    # ged4py may return DateValue objects
    if date_rec and date_rec.value:
        return str(date_rec.value)
    return None


def extract_sex(indi) -> str | None:
    sex_rec = indi.sub_tag("SEX")
    return sex_rec.value if sex_rec else None


def _xref_to_id(rec) -> int | None:
    if rec is None or not rec.xref_id:
        return None
    return extract_numeric_id(rec.xref_id)


def normalize_data(reader: GedcomReader) -> list[Person]:
    """
    Convert parsed GEDCOM records into person records.

    Each family gives its partners to each other as spouse (the first family
    of a person wins) and appends the family's children to both partners.
    Ignores non-standard Ancestry-specific tags (starting with _).
    """
    fields: dict[int, dict] = {}

    # First pass: extract all individuals
    for rec in reader.records0("INDI"):
        if rec.xref_id is None:
            continue
        indi_id = extract_numeric_id(rec.xref_id)
        fields[indi_id] = {
            "id": indi_id,
            "name": extract_name(rec),
            "birth": extract_event_date(rec, "BIRT"),
            "death": extract_event_date(rec, "DEAT"),
            "sex": extract_sex(rec),
            "spouse": None,
            "children": [],
        }

    # Second pass: family records
    for rec in reader.records0("FAM"):
        if rec.xref_id is None:
            continue

        husb_id = _xref_to_id(rec.sub_tag("HUSB"))
        wife_id = _xref_to_id(rec.sub_tag("WIFE"))
        partners = [p for p in (husb_id, wife_id) if p is not None and p in fields]

        child_ids = [
            extract_numeric_id(child.xref_id) for child in rec.sub_tags("CHIL") if child.xref_id
        ]

        if husb_id in fields and wife_id in fields:
            for a, b in ((husb_id, wife_id), (wife_id, husb_id)):
                if fields[a]["spouse"] is None:
                    fields[a]["spouse"] = b
                elif fields[a]["spouse"] != b:
                    logger.info("Person %s has more than one union; keeping the first", a)

        for pid in partners:
            for child_id in child_ids:
                if child_id not in fields[pid]["children"]:
                    fields[pid]["children"].append(child_id)

    return [
        Person(
            id=f["id"],
            name=f["name"],
            birth=f["birth"],
            death=f["death"],
            sex=f["sex"],
            spouse=f["spouse"],
            children=tuple(f["children"]),
        )
        for f in fields.values()
    ]


def read_gedcom_people(filepath: Path) -> list[Person]:
    """Parse a GEDCOM file into person records."""
    try:
        with GedcomReader(str(filepath)) as reader:
            return normalize_data(reader)
    except (OSError, ValueError, ParserError) as e:
        raise DataLoadError(f"Cannot read GEDCOM file {filepath}: {e}") from e
