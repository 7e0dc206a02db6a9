# filmlib/forms.py
import logging
from typing import List, Optional

logger = logging.getLogger(__name__)

# Exceptions
class ValidationError(Exception):
    """Raised when submitted film or login fields are unusable."""
    pass

class NotFoundError(Exception):
    """Raised when a film id from a request does not exist."""
    pass

REQUIRED_FILM_FIELDS = ("title", "director", "id_number")

# incoming payload key -> Film attribute
_FIELD_ALIASES = {
    "title": "title",
    "director": "director",
    "idNumber": "id_number",
    "id_number": "id_number",
    "actors": "actors",
    "year": "year",
    "genre": "genre",
    "tags": "tags",
    "imageUrl": "image_url",
    "image_url": "image_url",
}

def parse_tags(raw) -> List[str]:
    """Accept a list or a comma separated string; blanks are dropped."""
    if raw is None:
        return []
    if isinstance(raw, str):
        items = raw.split(",")
    else:
        items = [str(x) for x in raw]
    return [t.strip() for t in items if t and t.strip()]

def _clean(value) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None

def film_fields_from_payload(data: dict) -> dict:
    """
    Normalize a submitted film payload into add_film/update keyword fields.
    Title, director and id number must be present and non-blank.
    """
    fields = {}
    for key, attr in _FIELD_ALIASES.items():
        if key in data:
            fields[attr] = data[key]
    out = {}
    for attr in ("title", "director", "id_number", "actors", "year", "genre", "image_url"):
        out[attr] = _clean(fields.get(attr))
    out["tags"] = parse_tags(fields.get("tags"))
    missing = [f for f in REQUIRED_FILM_FIELDS if not out[f]]
    if missing:
        logger.warning("film payload missing required fields: %s", ", ".join(missing))
        raise ValidationError("Title, director, and ID number are required")
    return out
