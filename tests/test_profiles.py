import pytest

from errors import NotFoundError, ValidationError
from profiles import (
    MAX_PAGE_SIZE, list_user_comments, list_user_posts, load_profile, normalize_page, page_meta,
    profile_counts, update_profile,
)
from reactions import DISLIKE, LIKE, apply_reaction


def test_load_profile(make_user):
    user_id = make_user("poet")
    profile = load_profile("poet")
    assert profile["id"] == user_id
    assert profile["display_name"] == "poet"
    assert profile["avatar_path"] is None


def test_load_missing_profile(db):
    with pytest.raises(NotFoundError):
        load_profile("ghost")


def test_counts_only_include_likes_on_posts(make_user, make_post, make_comment):
    author = make_user()
    fans = [make_user() for _ in range(3)]
    p1 = make_post(author)
    p2 = make_post(author)
    c1 = make_comment(author, p1)
    make_comment(fans[0], p1)
    apply_reaction(fans[0], "post", p1, LIKE)
    apply_reaction(fans[1], "post", p1, LIKE)
    apply_reaction(fans[2], "post", p2, DISLIKE)
    apply_reaction(fans[2], "comment", c1, LIKE)

    assert profile_counts(author) == {"posts": 2, "comments": 1, "likes_received": 2}
    assert profile_counts(fans[0]) == {"posts": 0, "comments": 1, "likes_received": 0}


@pytest.mark.parametrize("page,size,expected", [
    (1, 10, (1, 10)),
    (0, 10, (1, 10)),
    (-4, 10, (1, 10)),
    (2, 0, (2, 10)),
    (2, 500, (2, MAX_PAGE_SIZE)),
    ("3", "5", (3, 5)),
    ("x", None, (1, 10)),
])
def test_normalize_page(page, size, expected):
    assert normalize_page(page, size) == expected


def test_pagination_over_twenty_five_posts(make_user, make_post):
    author = make_user()
    ids = [make_post(author, title=f"Post {i}") for i in range(25)]

    first, total = list_user_posts(author, 1, 10)
    meta = page_meta(1, 10, total)
    assert total == 25
    assert [p["id"] for p in first] == list(reversed(ids))[:10]
    assert meta["has_next"] and not meta["has_prev"]

    last, total = list_user_posts(author, 3, 10)
    meta = page_meta(3, 10, total)
    assert [p["id"] for p in last] == list(reversed(ids))[20:]
    assert len(last) == 5
    assert not meta["has_next"] and meta["has_prev"]


def test_comment_history_is_paginated_newest_first(make_user, make_post, make_comment):
    author = make_user()
    post_id = make_post(author, title="Thread")
    ids = [make_comment(author, post_id, f"c{i}") for i in range(3)]

    items, total = list_user_comments(author, 1, 2)

    assert total == 3
    assert [c["id"] for c in items] == [ids[2], ids[1]]
    assert items[0]["post_title"] == "Thread"


def test_update_profile(make_user):
    user_id = make_user("poet")
    update_profile(user_id, "  The Poet ", " writes verse ")
    profile = load_profile("poet")
    assert profile["display_name"] == "The Poet"
    assert profile["bio"] == "writes verse"


@pytest.mark.parametrize("display_name,bio", [("", "bio"), ("x" * 51, ""), ("ok", "b" * 281)])
def test_update_profile_rejects_bad_input(make_user, display_name, bio):
    with pytest.raises(ValidationError):
        update_profile(make_user(), display_name, bio)
