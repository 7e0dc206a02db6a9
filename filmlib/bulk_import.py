# filmlib/bulk_import.py
import logging
from typing import List, Tuple

from filmlib.forms import ValidationError

logger = logging.getLogger(__name__)

CSV_TEMPLATE = ("Title,Director,Actors,Genre,ID Number,Year,Tags\n"
                "Film Title,Director Name,Actor1;Actor2,Genre,ID1,2023,tag1;tag2")

def _column(headers: List[str], needle: str) -> int:
    for i, h in enumerate(headers):
        if needle in h.lower():
            return i
    return -1

def parse_bulk_rows(text: str) -> List[dict]:
    """
    Parse pasted CSV text into film field dicts.

    The first line is the header; title, director and id number columns are
    found by case-insensitive substring. Cells are split on "," only (no
    quoting). Rows with fewer than three cells or a blank required cell are
    skipped.
    """
    if not text or not text.strip():
        raise ValidationError("Please enter some data to import")
    rows = text.strip().split("\n")
    headers = rows[0].split(",")
    title_idx = _column(headers, "title")
    director_idx = _column(headers, "director")
    id_idx = _column(headers, "id")
    if -1 in (title_idx, director_idx, id_idx):
        raise ValidationError("CSV must include title, director, and ID number columns")

    out = []
    for line_no, line in enumerate(rows[1:], start=2):
        values = line.split(",")
        if len(values) < 3:
            logger.debug("bulk import: line %d has too few cells", line_no)
            continue
        try:
            title = values[title_idx].strip()
            director = values[director_idx].strip()
            id_number = values[id_idx].strip()
        except IndexError:
            logger.debug("bulk import: line %d is shorter than the header", line_no)
            continue
        if not title or not director or not id_number:
            continue
        out.append({"title": title, "director": director, "id_number": id_number})
    return out

def import_films(library, text: str) -> Tuple[int, List[str]]:
    """Add one film per valid CSV row. Returns (added_count, added_ids)."""
    added_ids = []
    for fields in parse_bulk_rows(text):
        film = library.add_film(**fields)
        added_ids.append(film.id)
    logger.info("Bulk import added %d films", len(added_ids))
    return len(added_ids), added_ids
