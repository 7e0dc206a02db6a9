# filmlib/library.py
import logging
import math
import unicodedata
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from filmlib.models import Film, GenreCount, new_film_id, now_utc
from filmlib.storage import FILMS_KEY, RECENT_SEARCHES_KEY

logger = logging.getLogger(__name__)

MAX_RECENT_SEARCHES = 5
FILM_UNIT_COST_MB = 2
TOTAL_CAPACITY_MB = 10000

SORT_KEYS = ("title", "director", "year", "idNumber", "dateAdded")
CATEGORIES = ("director", "actor", "genre", "year")

def collation_key(value: Optional[str]):
    """Accent- and case-insensitive ordering; on a case-only tie lowercase comes first."""
    s = value or ""
    folded = "".join(ch for ch in unicodedata.normalize("NFKD", s) if not unicodedata.combining(ch))
    return (folded.casefold(), s.swapcase())

def as_utc(d: datetime) -> datetime:
    return d if d.tzinfo else d.replace(tzinfo=timezone.utc)

def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))

def _contains(haystack: Optional[str], needle: str) -> bool:
    return bool(haystack) and needle in haystack.lower()

class LibraryStore:
    """
    Owns the film collection (newest first) and the recent-search list.

    Pure query helpers (search, sort, filter, statistics) never touch storage;
    every mutation updates memory first and then writes the affected document
    through the injected key-value storage. Films are copied on the way in and
    out, so callers cannot change store state behind its back.
    """

    def __init__(self, kv):
        self.kv = kv
        raw_films = kv.get(FILMS_KEY) or []
        self._films: List[Film] = [Film.from_dict(d) for d in raw_films]
        self._recent_searches: List[str] = list(kv.get(RECENT_SEARCHES_KEY) or [])
        logger.debug("LibraryStore loaded %d films, %d recent searches",
                     len(self._films), len(self._recent_searches))
        unstamped = sum(1 for d in raw_films if not d.get("dateAdded"))
        if unstamped:
            # pin the load-time stamp so it does not move on the next restart
            self._persist_films()
            logger.info("Stamped dateAdded on %d stored films", unstamped)

    # ---- persistence ----
    def _persist_films(self) -> None:
        self.kv.set(FILMS_KEY, [f.to_dict() for f in self._films])

    def _persist_searches(self) -> None:
        self.kv.set(RECENT_SEARCHES_KEY, list(self._recent_searches))

    # ---- snapshots ----
    @property
    def films(self) -> List[Film]:
        return [f.copy() for f in self._films]

    @property
    def recent_searches(self) -> List[str]:
        return list(self._recent_searches)

    # ---- mutations ----
    def add_film(self, title: str, director: str, id_number: str, actors: Optional[str] = None,
                 year: Optional[str] = None, genre: Optional[str] = None,
                 tags: Optional[List[str]] = None, image_url: Optional[str] = None) -> Film:
        """Create a film with a fresh id and timestamp. Fields are stored as given."""
        film = Film(id=new_film_id(), title=title, director=director, id_number=id_number,
                    actors=actors, year=year, genre=genre,
                    tags=list(tags) if tags is not None else None,
                    image_url=image_url, date_added=now_utc())
        self._films.insert(0, film)
        self._persist_films()
        logger.info("Added film id=%s title=%s", film.id, film.title)
        return film.copy()

    def delete_film(self, film_id: str) -> None:
        before = len(self._films)
        self._films = [f for f in self._films if f.id != film_id]
        self._persist_films()
        if len(self._films) < before:
            logger.info("Deleted film id=%s", film_id)
        else:
            logger.debug("delete_film: film %s not found", film_id)

    def update_film(self, film: Film) -> None:
        """Replace the film with the same id in place. The original date_added is kept."""
        for i, current in enumerate(self._films):
            if current.id == film.id:
                updated = film.copy()
                updated.date_added = current.date_added
                self._films[i] = updated
                logger.info("Updated film id=%s", film.id)
                break
        else:
            logger.debug("update_film: film %s not found", film.id)
        self._persist_films()

    def add_search(self, query: str) -> None:
        q = (query or "").strip()
        if not q:
            return
        searches = [s for s in self._recent_searches if s != q]
        self._recent_searches = [q] + searches[:MAX_RECENT_SEARCHES - 1]
        self._persist_searches()
        logger.debug("Recorded search %r", q)

    # ---- lookups & queries ----
    def get_film_by_id(self, film_id: str) -> Optional[Film]:
        for f in self._films:
            if f.id == film_id:
                return f.copy()
        return None

    def search_films(self, query: str) -> List[Film]:
        """
        Case-insensitive substring match on title, director, actors and id_number.
        A blank query returns the whole collection.
        """
        if not query or not query.strip():
            return self.films
        q = query.lower()
        return [f.copy() for f in self._films
                if _contains(f.title, q) or _contains(f.director, q)
                or _contains(f.actors, q) or _contains(f.id_number, q)]

    def sort_films(self, films: Iterable[Film], key: str) -> List[Film]:
        """
        Return a new list ordered by key. Text keys sort ascending; dateAdded
        sorts newest first. An unknown key leaves the order untouched.
        """
        films = list(films)
        if key == "title":
            return sorted(films, key=lambda f: collation_key(f.title))
        if key == "director":
            return sorted(films, key=lambda f: collation_key(f.director))
        if key == "year":
            return sorted(films, key=lambda f: collation_key(f.year or ""))
        if key == "idNumber":
            return sorted(films, key=lambda f: collation_key(f.id_number))
        if key == "dateAdded":
            return sorted(films, key=lambda f: as_utc(f.date_added), reverse=True)
        return films

    def filter_films(self, films: Iterable[Film], filters: Dict[str, object]) -> List[Film]:
        """AND of genre (exact), year (exact) and tags (any shared tag). Empty criteria are skipped."""
        genre = filters.get("genre")
        year = filters.get("year")
        tags = filters.get("tags")
        res = []
        for f in films:
            if genre and f.genre != genre:
                continue
            if year and f.year != year:
                continue
            if isinstance(tags, (list, tuple, set)) and tags:
                if not f.tags or not any(t in f.tags for t in tags):
                    continue
            res.append(f)
        return res

    def filter_by_category(self, films: Iterable[Film], category: str, value: Optional[str]) -> List[Film]:
        """
        Single active category: director or actor (substring, case-insensitive),
        genre or year (exact). Unknown category or blank value is a pass-through.
        """
        films = list(films)
        if category not in CATEGORIES or not value or not value.strip():
            return films
        v = value.strip()
        if category == "director":
            return [f for f in films if _contains(f.director, v.lower())]
        if category == "actor":
            return [f for f in films if _contains(f.actors, v.lower())]
        if category == "genre":
            return [f for f in films if f.genre == v]
        return [f for f in films if f.year == v]

    # ---- statistics ----
    def get_storage_used_percentage(self) -> int:
        used = len(self._films) * FILM_UNIT_COST_MB
        return min(round_half_up(used / TOTAL_CAPACITY_MB * 100), 100)

    def get_most_added_genre(self) -> GenreCount:
        counts: Dict[str, int] = {}
        for f in self._films:
            if f.genre:
                counts[f.genre] = counts.get(f.genre, 0) + 1
        best = GenreCount(genre="none", count=0)
        for genre, count in counts.items():
            if count > best.count:
                best = GenreCount(genre=genre, count=count)
        return best

    def recent_films(self, limit: int = 5) -> List[Film]:
        return self.sort_films(self.films, "dateAdded")[:limit]

    def days_since_last_upload(self, now: Optional[datetime] = None) -> int:
        if not self._films:
            return 0
        now = as_utc(now or now_utc())
        latest = max(as_utc(f.date_added) for f in self._films)
        seconds = abs((now - latest).total_seconds())
        return math.ceil(seconds / 86400)

    def distinct_genres(self) -> List[str]:
        return list(dict.fromkeys(f.genre for f in self._films if f.genre))

    def distinct_years(self) -> List[str]:
        return list(dict.fromkeys(f.year for f in self._films if f.year))
