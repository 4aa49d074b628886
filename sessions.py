"""Session manager: opaque tokens with an absolute expiry.

An expired session is treated as absent and deleted the next time it is
read. Nothing sweeps sessions in the background, and nothing needs to.
"""

import logging
import secrets
import time
from typing import Optional, Tuple

from config import get_settings
from database import get_db

logger = logging.getLogger(__name__)

def create_session(user_id: int) -> Tuple[str, int]:
    """Persist a new session and return (token, expires_at in unix seconds)."""
    token = secrets.token_urlsafe(32)
    expires_at = int(time.time()) + get_settings().session_ttl_seconds
    with get_db() as conn:
        conn.execute(
            "INSERT INTO sessions (token, user_id, expires_at) VALUES (?, ?, ?)",
            (token, user_id, expires_at),
        )
        conn.commit()
    logger.debug("Session created", extra={"user_id": user_id})
    return token, expires_at

def resolve_session(token: Optional[str]) -> Optional[dict]:
    """Return the user owning a live session, or None.

    One read joined to the user, plus a delete only when the row has expired.
    """
    if not token:
        return None
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("""
            SELECT u.id, u.email, u.username, COALESCE(u.display_name, ''), COALESCE(u.bio, ''),
                   COALESCE(u.avatar_path, ''), s.expires_at
            FROM sessions s
            JOIN users u ON u.id = s.user_id
            WHERE s.token = ?
        """, (token,))
        row = cursor.fetchone()
        if not row:
            return None
        if row[6] < int(time.time()):
            cursor.execute("DELETE FROM sessions WHERE token = ?", (token,))
            conn.commit()
            logger.info("Expired session purged", extra={"user_id": row[0]})
            return None
    return {
        "id": row[0], "email": row[1], "username": row[2], "display_name": row[3],
        "bio": row[4], "avatar_path": row[5], "expires_at": row[6],
    }

def destroy_session(token: Optional[str]) -> None:
    """Delete a session. Deleting a missing session is not an error."""
    if not token:
        return
    with get_db() as conn:
        conn.execute("DELETE FROM sessions WHERE token = ?", (token,))
        conn.commit()
