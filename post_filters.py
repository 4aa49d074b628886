"""Post listing with composable filters.

Each filter contributes its own JOIN and/or WHERE fragment plus parameters.
``compose_listing_query`` folds an ordered list of filters into a single
parameterized statement, so adding a filter never means writing another
variant of the listing query.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from database import get_db

LISTING_LIMIT = 100

@dataclass(frozen=True)
class ByCategory:
    category_id: int

@dataclass(frozen=True)
class ByAuthor:
    user_id: int

@dataclass(frozen=True)
class LikedBy:
    user_id: int

PostFilter = Union[ByCategory, ByAuthor, LikedBy]

@dataclass(frozen=True)
class Clause:
    join: Optional[str] = None
    where: Optional[str] = None
    join_params: Tuple = ()
    where_params: Tuple = ()

_BASE_SELECT = """
    SELECT p.id, p.title, p.user_id, u.username, COALESCE(u.display_name, ''),
           COALESCE(u.avatar_path, ''), p.created_at,
           COALESCE(GROUP_CONCAT(c.name, ', '), '') AS categories
    FROM posts p
    JOIN users u ON u.id = p.user_id
    LEFT JOIN post_categories pc ON pc.post_id = p.id
    LEFT JOIN categories c ON c.id = pc.category_id
"""

def to_clause(post_filter: PostFilter, alias: str) -> Clause:
    """Translate one filter into SQL. ``alias`` keeps joined tables distinct."""
    if isinstance(post_filter, ByCategory):
        return Clause(
            join=f"JOIN post_categories {alias} ON {alias}.post_id = p.id",
            where=f"{alias}.category_id = ?",
            where_params=(post_filter.category_id,),
        )
    if isinstance(post_filter, ByAuthor):
        return Clause(where="p.user_id = ?", where_params=(post_filter.user_id,))
    if isinstance(post_filter, LikedBy):
        return Clause(
            join=f"JOIN post_reactions {alias} ON {alias}.post_id = p.id AND {alias}.user_id = ? AND {alias}.value = 1",
            join_params=(post_filter.user_id,),
        )
    raise TypeError(f"Unsupported post filter: {post_filter!r}")

def compose_listing_query(filters: Sequence[PostFilter], limit: int = LISTING_LIMIT) -> Tuple[str, list]:
    """Build the listing statement and its parameters for the given filters.

    Filters combine with AND. Grouping by post id collapses the category join
    before ordering and limiting.
    """
    joins, wheres = [], []
    join_params, where_params = [], []
    for index, post_filter in enumerate(filters):
        clause = to_clause(post_filter, f"f{index}")
        if clause.join:
            joins.append(clause.join)
            join_params.extend(clause.join_params)
        if clause.where:
            wheres.append(clause.where)
            where_params.extend(clause.where_params)

    sql = _BASE_SELECT
    if joins:
        sql += "    " + "\n    ".join(joins) + "\n"
    if wheres:
        sql += "    WHERE " + " AND ".join(wheres) + "\n"
    sql += "    GROUP BY p.id\n    ORDER BY p.created_at DESC, p.id DESC\n    LIMIT ?"
    return sql, join_params + where_params + [limit]

def build_filters(viewer: Optional[dict], category: Optional[str] = None,
                  mine: bool = False, liked: bool = False) -> List[PostFilter]:
    """Turn request parameters into filters.

    Viewer-relative filters are dropped for anonymous requests. A category
    value that is not an integer matches no post.
    """
    filters: List[PostFilter] = []
    if category not in (None, ""):
        try:
            category_id = int(category)
        except (TypeError, ValueError):
            category_id = -1
        filters.append(ByCategory(category_id))
    if mine and viewer:
        filters.append(ByAuthor(viewer["id"]))
    if liked and viewer:
        filters.append(LikedBy(viewer["id"]))
    return filters

def list_posts(filters: Sequence[PostFilter], limit: int = LISTING_LIMIT) -> List[dict]:
    sql, params = compose_listing_query(filters, limit)
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(sql, params)
        rows = cursor.fetchall()
    return [
        {
            "id": r[0], "title": r[1], "user_id": r[2], "author_username": r[3],
            "author_display_name": r[4] or r[3], "author_avatar_path": r[5] or None,
            "created_at": r[6], "categories": r[7],
        }
        for r in rows
    ]
