import hashlib
import logging
import sqlite3
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from config import get_settings
from database import get_db
from errors import ConflictError

logger = logging.getLogger(__name__)

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ALGORITHM = "HS256"

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def create_user(email: str, username: str, password: str) -> int:
    """Insert a new user and return its id.

    Uniqueness of email and username is left to the table constraints, so two
    concurrent registrations cannot both pass a check and then both insert.
    """
    hashed = hash_password(password)
    with get_db() as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                "INSERT INTO users (email, username, password_hash, display_name, bio) VALUES (?, ?, ?, ?, ?)",
                (email, username, hashed, username, ""),
            )
        except sqlite3.IntegrityError as exc:
            conn.rollback()
            raise ConflictError("Email or username already exists") from exc
        user_id = cursor.lastrowid
        conn.commit()
    logger.info("User registered", extra={"user_id": user_id})
    return user_id

def authenticate(email: str, password: str) -> Optional[dict]:
    """Return the user for a matching email/password pair, None otherwise."""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT id, username, password_hash FROM users WHERE email = ?", (email,))
        row = cursor.fetchone()
    if not row:
        # keep timing similar for unknown accounts
        pwd_context.dummy_verify()
        return None
    if not verify_password(password, row[2]):
        return None
    return {"id": row[0], "username": row[1]}

def _session_fingerprint(session_token: str) -> str:
    return hashlib.sha256(session_token.encode("utf-8")).hexdigest()

def create_csrf_token(session_token: str, expires_delta: Optional[timedelta] = None) -> str:
    """Signed token bound to one session; no server-side state is kept."""
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.csrf_token_expire_minutes)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"sub": _session_fingerprint(session_token), "exp": expire}
    return jwt.encode(to_encode, settings.csrf_secret_key, algorithm=ALGORITHM)

def verify_csrf_token(token: Optional[str], session_token: Optional[str]) -> bool:
    if not token or not session_token:
        return False
    try:
        payload = jwt.decode(token, get_settings().csrf_secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return False
    return payload.get("sub") == _session_fingerprint(session_token)
