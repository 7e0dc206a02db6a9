# filmlib/models.py
import copy
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

def now_utc() -> datetime:
    return datetime.now(timezone.utc)

def new_film_id() -> str:
    return str(uuid.uuid4())

@dataclass
class Credential:
    username: str
    password: str  # plaintext, compared as-is

@dataclass
class Session:
    username: str

    def to_dict(self) -> dict:
        return {"username": self.username}

    @classmethod
    def from_dict(cls, d: dict) -> "Session":
        return cls(username=d["username"])

@dataclass
class GenreCount:
    genre: str
    count: int

@dataclass
class Film:
    id: str
    title: str
    director: str
    id_number: str  # catalog number, not unique
    actors: Optional[str] = None
    year: Optional[str] = None
    genre: Optional[str] = None
    tags: Optional[List[str]] = None
    image_url: Optional[str] = None
    date_added: datetime = field(default_factory=now_utc)

    def __post_init__(self):
        if self.date_added.tzinfo is None:
            self.date_added = self.date_added.replace(tzinfo=timezone.utc)

    def copy(self) -> "Film":
        return copy.deepcopy(self)

    def to_dict(self) -> dict:
        """Serialized form, using the persisted camelCase keys."""
        return {
            "id": self.id,
            "title": self.title,
            "director": self.director,
            "idNumber": self.id_number,
            "actors": self.actors,
            "year": self.year,
            "genre": self.genre,
            "tags": list(self.tags) if self.tags is not None else None,
            "imageUrl": self.image_url,
            "dateAdded": self.date_added.isoformat(),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Film":
        added = d.get("dateAdded")
        if added:
            # JSON dates from browsers end in "Z"
            date_added = datetime.fromisoformat(added.replace("Z", "+00:00"))
            if date_added.tzinfo is None:
                date_added = date_added.replace(tzinfo=timezone.utc)
        else:
            date_added = now_utc()
        tags = d.get("tags")
        return cls(
            id=d["id"],
            title=d.get("title", ""),
            director=d.get("director", ""),
            id_number=d.get("idNumber", ""),
            actors=d.get("actors"),
            year=d.get("year"),
            genre=d.get("genre"),
            tags=list(tags) if tags is not None else None,
            image_url=d.get("imageUrl"),
            date_added=date_added,
        )
