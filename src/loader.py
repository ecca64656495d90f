"""Load person records from a JSON or GEDCOM file."""

from pathlib import Path
import json
import logging

from models import Person

logger = logging.getLogger(__name__)


class DataLoadError(Exception):
    """The person data could not be read; nothing should be rendered."""


def _is_id(value) -> bool:
    return isinstance(value, (int, str)) and not isinstance(value, bool) and value != ""


def _optional_str(value) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def person_from_record(record: dict) -> Person:
    """
    Map one JSON record onto a Person.

    Only `id` is required. Missing names become empty strings and a null or
    missing children list becomes an empty tuple.
    """
    children = record.get("children") or ()
    if not isinstance(children, (list, tuple)):
        children = (children,)

    spouse = record.get("spouse")
    if not _is_id(spouse):
        spouse = None

    return Person(
        id=record["id"],
        name=str(record.get("name") or ""),
        birth=_optional_str(record.get("birth")),
        death=_optional_str(record.get("death")),
        photo=_optional_str(record.get("photo")),
        spouse=spouse,
        children=tuple(c for c in children if _is_id(c)),
        sex=_optional_str(record.get("sex")),
    )


def people_from_records(records: list) -> list[Person]:
    """Convert raw records, skipping entries that cannot be people."""
    people: list[Person] = []
    for i, record in enumerate(records):
        if not isinstance(record, dict):
            logger.warning("Skipping record %d: expected an object, got %s", i, type(record).__name__)
            continue
        if not _is_id(record.get("id")):
            logger.warning("Skipping record %d: missing or invalid id", i)
            continue
        people.append(person_from_record(record))
    return people


def load_people(path: Path) -> list[Person]:
    """
    Read person records from path.

    JSON files hold either a list of records or an object with a `people`
    list. Files ending in .ged are read as GEDCOM.

    Raises:
        DataLoadError: if the file is missing, unreadable or malformed
    """
    path = Path(path)

    if path.suffix.lower() == ".ged":
        from parsing import read_gedcom_people

        return read_gedcom_people(path)

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise DataLoadError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise DataLoadError(f"Invalid JSON in {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("people")
    if not isinstance(data, list):
        raise DataLoadError(f"{path} does not contain a list of people")

    return people_from_records(data)
