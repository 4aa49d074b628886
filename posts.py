import logging
import sqlite3
from typing import List, Optional

from database import get_db
from errors import NotFoundError, ValidationError
from reactions import reaction_counts, viewer_reaction

logger = logging.getLogger(__name__)

def parse_categories(raw: Optional[str]) -> List[str]:
    """Split a comma-separated category string, dropping blanks and repeats."""
    if not raw:
        return []
    names = []
    for part in raw.split(","):
        name = part.strip()
        if name and name not in names:
            names.append(name)
    return names

def create_post(user_id: int, title: str, content: str, categories: Optional[str] = None) -> int:
    """Insert a post and its category links in one transaction.

    Categories are created on demand the first time a name is used.
    """
    title = (title or "").strip()
    content = (content or "").strip()
    if not title or not content:
        raise ValidationError("Title and content are required")
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "INSERT INTO posts (user_id, title, content) VALUES (?, ?, ?)",
            (user_id, title, content),
        )
        post_id = cursor.lastrowid
        for name in parse_categories(categories):
            cursor.execute("INSERT OR IGNORE INTO categories (name) VALUES (?)", (name,))
            cursor.execute("SELECT id FROM categories WHERE name = ?", (name,))
            category_id = cursor.fetchone()[0]
            cursor.execute(
                "INSERT OR IGNORE INTO post_categories (post_id, category_id) VALUES (?, ?)",
                (post_id, category_id),
            )
        conn.commit()
    logger.info("Post created", extra={"user_id": user_id, "post_id": post_id})
    return post_id

def list_categories() -> List[dict]:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT id, name FROM categories ORDER BY name")
        return [{"id": row[0], "name": row[1]} for row in cursor.fetchall()]

def get_post_categories(post_id: int) -> List[str]:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("""
            SELECT c.name
            FROM categories c
            JOIN post_categories pc ON pc.category_id = c.id
            WHERE pc.post_id = ?
            ORDER BY c.name
        """, (post_id,))
        return [row[0] for row in cursor.fetchall()]

_COMMENT_SELECT = """
    SELECT c.id, c.post_id, c.user_id, u.username, COALESCE(u.display_name, ''),
           COALESCE(u.avatar_path, ''), c.content, c.created_at
    FROM comments c
    JOIN users u ON u.id = c.user_id
"""

def _comment_from_row(r, viewer_id: Optional[int]) -> dict:
    likes, dislikes = reaction_counts("comment", r[0])
    return {
        "id": r[0], "post_id": r[1], "user_id": r[2], "author_username": r[3],
        "author_display_name": r[4] or r[3], "author_avatar_path": r[5] or None,
        "content": r[6], "created_at": r[7], "likes": likes, "dislikes": dislikes,
        "viewer_reaction": viewer_reaction(viewer_id, "comment", r[0]),
    }

def get_post_comments(post_id: int, viewer_id: Optional[int] = None) -> List[dict]:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(_COMMENT_SELECT + " WHERE c.post_id = ? ORDER BY c.created_at ASC, c.id ASC", (post_id,))
        rows = cursor.fetchall()
    return [_comment_from_row(r, viewer_id) for r in rows]

def get_comment(comment_id: int, viewer_id: Optional[int] = None) -> dict:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(_COMMENT_SELECT + " WHERE c.id = ?", (comment_id,))
        row = cursor.fetchone()
    if not row:
        raise NotFoundError("Comment", comment_id)
    return _comment_from_row(row, viewer_id)

def get_post_detail(post_id: int, viewer_id: Optional[int] = None) -> dict:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("""
            SELECT p.id, p.user_id, u.username, COALESCE(u.display_name, ''), COALESCE(u.avatar_path, ''),
                   p.title, p.content, p.created_at
            FROM posts p
            JOIN users u ON u.id = p.user_id
            WHERE p.id = ?
        """, (post_id,))
        row = cursor.fetchone()
    if not row:
        raise NotFoundError("Post", post_id)
    likes, dislikes = reaction_counts("post", post_id)
    return {
        "id": row[0], "user_id": row[1], "author_username": row[2],
        "author_display_name": row[3] or row[2], "author_avatar_path": row[4] or None,
        "title": row[5], "content": row[6], "created_at": row[7],
        "categories": get_post_categories(post_id),
        "likes": likes, "dislikes": dislikes,
        "viewer_reaction": viewer_reaction(viewer_id, "post", post_id),
        "comments": get_post_comments(post_id, viewer_id),
    }

def add_comment(user_id: int, post_id: int, content: str) -> int:
    content = (content or "").strip()
    if not isinstance(post_id, int) or post_id <= 0 or not content:
        raise ValidationError("A post id and comment content are required")
    with get_db() as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                "INSERT INTO comments (post_id, user_id, content) VALUES (?, ?, ?)",
                (post_id, user_id, content),
            )
        except sqlite3.IntegrityError as exc:
            conn.rollback()
            raise NotFoundError("Post", post_id) from exc
        comment_id = cursor.lastrowid
        conn.commit()
    logger.info("Comment added", extra={"user_id": user_id, "post_id": post_id})
    return comment_id

def comment_exists(comment_id: int) -> bool:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT 1 FROM comments WHERE id = ?", (comment_id,))
        return cursor.fetchone() is not None

def post_exists(post_id: int) -> bool:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT 1 FROM posts WHERE id = ?", (post_id,))
        return cursor.fetchone() is not None
