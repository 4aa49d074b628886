"""Like/dislike toggle for posts and comments.

Per (user, target) the state is one of Unvoted, Liked or Disliked. Repeating
a vote removes it; the opposite vote flips it in place. Counts are always
derived from the reaction rows.
"""

import logging
import sqlite3
from typing import Optional, Tuple

from database import get_db
from errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

LIKE = 1
DISLIKE = -1

# kind -> (table, target column)
_RELATIONS = {
    "post": ("post_reactions", "post_id"),
    "comment": ("comment_reactions", "comment_id"),
}

def _relation(kind) -> Tuple[str, str]:
    if kind not in _RELATIONS:
        raise ValidationError("Reaction kind must be 'post' or 'comment'", field="kind")
    return _RELATIONS[kind]

def _validate_target_id(target_id):
    if isinstance(target_id, bool) or not isinstance(target_id, int) or target_id <= 0:
        raise ValidationError("Target id must be a positive integer", field="id")

def validate_reaction(kind, target_id, value) -> Tuple[str, str]:
    """Check all reaction arguments without touching storage."""
    relation = _relation(kind)
    _validate_target_id(target_id)
    if isinstance(value, bool) or value not in (LIKE, DISLIKE):
        raise ValidationError("Value must be 1 (like) or -1 (dislike)", field="v")
    return relation

def apply_reaction(user_id: int, kind: str, target_id: int, value: int) -> Optional[int]:
    """Toggle a reaction and return the resulting value (1, -1 or None).

    The read and the write share one IMMEDIATE transaction, so two concurrent
    toggles for the same pair are serialized by the store. The primary key on
    (user, target) still guarantees a single row if they were not.
    """
    table, column = validate_reaction(kind, target_id, value)
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("BEGIN IMMEDIATE")
        cursor.execute(
            f"SELECT value FROM {table} WHERE user_id = ? AND {column} = ?",
            (user_id, target_id),
        )
        row = cursor.fetchone()
        if row is None:
            try:
                cursor.execute(
                    f"INSERT INTO {table} (user_id, {column}, value) VALUES (?, ?, ?)",
                    (user_id, target_id, value),
                )
            except sqlite3.IntegrityError as exc:
                conn.rollback()
                raise NotFoundError(kind.capitalize(), target_id) from exc
            result = value
        elif row[0] == value:
            cursor.execute(f"DELETE FROM {table} WHERE user_id = ? AND {column} = ?", (user_id, target_id))
            result = None
        else:
            cursor.execute(
                f"UPDATE {table} SET value = ? WHERE user_id = ? AND {column} = ?",
                (value, user_id, target_id),
            )
            result = value
        conn.commit()
    logger.info(
        f"Reaction now {result}",
        extra={"user_id": user_id, "target_kind": kind, "target_id": target_id},
    )
    return result

def reaction_counts(kind: str, target_id: int) -> Tuple[int, int]:
    """Return (likes, dislikes) for a target."""
    table, column = _relation(kind)
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(f"""
            SELECT COUNT(CASE WHEN value = 1 THEN 1 END),
                   COUNT(CASE WHEN value = -1 THEN 1 END)
            FROM {table} WHERE {column} = ?
        """, (target_id,))
        likes, dislikes = cursor.fetchone()
    return likes, dislikes

def viewer_reaction(user_id: Optional[int], kind: str, target_id: int) -> Optional[int]:
    """The viewer's current vote on a target, None when unvoted or anonymous."""
    table, column = _relation(kind)
    if user_id is None:
        return None
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(f"SELECT value FROM {table} WHERE user_id = ? AND {column} = ?", (user_id, target_id))
        row = cursor.fetchone()
    return row[0] if row else None
