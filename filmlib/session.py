# filmlib/session.py
import enum
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from filmlib.models import Credential, Session
from filmlib.storage import USER_KEY, USERS_KEY

logger = logging.getLogger(__name__)

class AuthError(enum.Enum):
    ALREADY_EXISTS = "already_exists"
    INVALID_CREDENTIALS = "invalid_credentials"

@dataclass
class AuthResult:
    ok: bool
    session: Optional[Session] = None
    error: Optional[AuthError] = None

    def __bool__(self) -> bool:
        return self.ok

class SessionStore:
    """
    Owns the credential registry and the single active session.
    The storage object is injected (SqliteKV or InMemoryKV from filmlib.storage);
    the persisted session, if any, is restored on construction.
    """

    def __init__(self, kv):
        self.kv = kv
        self._users: Dict[str, Credential] = {}
        for name, rec in (kv.get(USERS_KEY) or {}).items():
            self._users[name] = Credential(username=name, password=rec.get("password", ""))
        saved = kv.get(USER_KEY)
        self._session: Optional[Session] = Session.from_dict(saved) if saved else None
        logger.debug("SessionStore loaded %d credentials, session=%s",
                     len(self._users), self._session.username if self._session else None)

    # ---- persistence ----
    def _persist_users(self) -> None:
        self.kv.set(USERS_KEY, {name: {"password": c.password} for name, c in self._users.items()})

    def _persist_session(self) -> None:
        self.kv.set(USER_KEY, self._session.to_dict())

    # ---- operations ----
    def signup(self, username: str, password: str) -> AuthResult:
        """Register a new user and log them in. Fails if the username is taken (exact match)."""
        if username in self._users:
            logger.warning("signup: username %s already exists", username)
            return AuthResult(ok=False, error=AuthError.ALREADY_EXISTS)
        self._users[username] = Credential(username=username, password=password)
        self._session = Session(username=username)
        self._persist_users()
        self._persist_session()
        logger.info("Signed up user %s", username)
        return AuthResult(ok=True, session=Session(username))

    def login(self, username: str, password: str, remember: bool = False) -> AuthResult:
        """
        Open a session when username and password match a registered credential.
        Only a remembered session is written to storage; otherwise the persisted
        record is dropped so a restart comes back logged out.
        """
        cred = self._users.get(username)
        if cred is None or cred.password != password:
            logger.warning("login: invalid credentials for %s", username)
            return AuthResult(ok=False, error=AuthError.INVALID_CREDENTIALS)
        self._session = Session(username=username)
        if remember:
            self._persist_session()
        else:
            self.kv.delete(USER_KEY)
        logger.info("Logged in user %s (remember=%s)", username, remember)
        return AuthResult(ok=True, session=Session(username))

    def logout(self) -> None:
        if self._session is None:
            return
        logger.info("Logged out user %s", self._session.username)
        self._session = None
        self.kv.delete(USER_KEY)

    def current_user(self) -> Optional[Session]:
        return Session(self._session.username) if self._session else None

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None
