import logging
from typing import List, Tuple

from database import get_db
from errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50
DISPLAY_NAME_MAX = 50
BIO_MAX = 280

def normalize_page(page, page_size) -> Tuple[int, int]:
    """Coerce page to >= 1 and page size into 1..MAX_PAGE_SIZE."""
    try:
        page = int(page)
    except (TypeError, ValueError):
        page = 1
    try:
        page_size = int(page_size)
    except (TypeError, ValueError):
        page_size = DEFAULT_PAGE_SIZE
    if page < 1:
        page = 1
    if page_size < 1:
        page_size = DEFAULT_PAGE_SIZE
    page_size = min(page_size, MAX_PAGE_SIZE)
    return page, page_size

def page_meta(page: int, page_size: int, total: int) -> dict:
    return {
        "page": page,
        "limit": page_size,
        "total": total,
        "has_prev": page > 1,
        "has_next": total > page * page_size,
    }

def load_profile(username: str) -> dict:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("""
            SELECT id, username, COALESCE(display_name, ''), COALESCE(bio, ''),
                   COALESCE(avatar_path, ''), created_at
            FROM users WHERE username = ?
        """, (username,))
        row = cursor.fetchone()
    if not row:
        raise NotFoundError("User", username)
    return {
        "id": row[0], "username": row[1], "display_name": row[2] or row[1],
        "bio": row[3], "avatar_path": row[4] or None, "created_at": row[5],
    }

def profile_counts(user_id: int) -> dict:
    """Posts, comments and likes received by a user.

    Likes received only counts likes on the user's posts, not on comments.
    """
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT COUNT(*) FROM posts WHERE user_id = ?", (user_id,))
        posts = cursor.fetchone()[0]
        cursor.execute("SELECT COUNT(*) FROM comments WHERE user_id = ?", (user_id,))
        comments = cursor.fetchone()[0]
        cursor.execute("""
            SELECT COUNT(*)
            FROM post_reactions pr
            JOIN posts p ON p.id = pr.post_id
            WHERE p.user_id = ? AND pr.value = 1
        """, (user_id,))
        likes_received = cursor.fetchone()[0]
    return {"posts": posts, "comments": comments, "likes_received": likes_received}

def list_user_posts(user_id: int, page: int, page_size: int) -> Tuple[List[dict], int]:
    page, page_size = normalize_page(page, page_size)
    offset = (page - 1) * page_size
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT COUNT(*) FROM posts WHERE user_id = ?", (user_id,))
        total = cursor.fetchone()[0]
        cursor.execute("""
            SELECT p.id, p.title, p.created_at,
                   (SELECT COUNT(*) FROM comments c WHERE c.post_id = p.id) AS comment_count
            FROM posts p
            WHERE p.user_id = ?
            ORDER BY p.created_at DESC, p.id DESC
            LIMIT ? OFFSET ?
        """, (user_id, page_size, offset))
        rows = cursor.fetchall()
    items = [{"id": r[0], "title": r[1], "created_at": r[2], "comment_count": r[3]} for r in rows]
    return items, total

def list_user_comments(user_id: int, page: int, page_size: int) -> Tuple[List[dict], int]:
    page, page_size = normalize_page(page, page_size)
    offset = (page - 1) * page_size
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT COUNT(*) FROM comments WHERE user_id = ?", (user_id,))
        total = cursor.fetchone()[0]
        cursor.execute("""
            SELECT c.id, c.post_id, p.title, c.content, c.created_at
            FROM comments c
            JOIN posts p ON p.id = c.post_id
            WHERE c.user_id = ?
            ORDER BY c.created_at DESC, c.id DESC
            LIMIT ? OFFSET ?
        """, (user_id, page_size, offset))
        rows = cursor.fetchall()
    items = [
        {"id": r[0], "post_id": r[1], "post_title": r[2], "content": r[3], "created_at": r[4]}
        for r in rows
    ]
    return items, total

def update_profile(user_id: int, display_name: str, bio: str) -> None:
    display_name = (display_name or "").strip()
    bio = (bio or "").strip()
    if not display_name or len(display_name) > DISPLAY_NAME_MAX:
        raise ValidationError(f"Display name must be 1-{DISPLAY_NAME_MAX} characters", field="display_name")
    if len(bio) > BIO_MAX:
        raise ValidationError(f"Bio must be at most {BIO_MAX} characters", field="bio")
    with get_db() as conn:
        conn.execute(
            "UPDATE users SET display_name = ?, bio = ? WHERE id = ?",
            (display_name, bio, user_id),
        )
        conn.commit()
    logger.info("Profile updated", extra={"user_id": user_id})

def set_avatar_path(user_id: int, avatar_path: str) -> None:
    with get_db() as conn:
        conn.execute("UPDATE users SET avatar_path = ? WHERE id = ?", (avatar_path, user_id))
        conn.commit()
