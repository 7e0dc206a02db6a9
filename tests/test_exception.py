import pytest
from filmlib.storage import InMemoryKV
from filmlib.library import LibraryStore
from filmlib.session import SessionStore
from filmlib.forms import ValidationError, film_fields_from_payload
from filmlib.bulk_import import parse_bulk_rows

class QuotaExceededKV(InMemoryKV):
    """Storage that refuses every write, like a full browser quota."""
    def set(self, key, value):
        raise OSError("quota exceeded")

@pytest.fixture
def broken_kv():
    return QuotaExceededKV()

def test_add_film_propagates_storage_fault(broken_kv):
    lib = LibraryStore(broken_kv)
    with pytest.raises(OSError, match="quota exceeded"):
        lib.add_film("Heat", "Michael Mann", "A-1")

def test_add_search_propagates_storage_fault(broken_kv):
    lib = LibraryStore(broken_kv)
    with pytest.raises(OSError, match="quota exceeded"):
        lib.add_search("heat")

def test_signup_propagates_storage_fault(broken_kv):
    with pytest.raises(OSError, match="quota exceeded"):
        SessionStore(broken_kv).signup("alice", "pw")

def test_login_without_remember_needs_no_write(broken_kv):
    kv = InMemoryKV()
    SessionStore(kv).signup("alice", "pw")
    broken_kv._data = dict(kv._data)
    sessions = SessionStore(broken_kv)
    sessions.logout()
    assert sessions.login("alice", "pw", remember=False)
    with pytest.raises(OSError):
        sessions.login("alice", "pw", remember=True)

def test_missing_ids_never_raise():
    lib = LibraryStore(InMemoryKV())
    lib.delete_film("nope")
    assert lib.get_film_by_id("nope") is None

@pytest.mark.parametrize("payload", [
    {},
    {"title": "Heat", "director": "Michael Mann"},
    {"title": "  ", "director": "Michael Mann", "idNumber": "A-1"},
    {"title": "Heat", "director": "", "idNumber": "A-1"},
])
def test_film_payload_requires_fields(payload):
    with pytest.raises(ValidationError, match="Title, director, and ID number are required"):
        film_fields_from_payload(payload)

def test_bulk_rows_require_header_columns():
    with pytest.raises(ValidationError, match="CSV must include title, director, and ID number columns"):
        parse_bulk_rows("Name,Maker\nHeat,Mann")

def test_bulk_rows_require_text():
    with pytest.raises(ValidationError, match="Please enter some data"):
        parse_bulk_rows("   ")
