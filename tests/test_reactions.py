import itertools
import random
import threading

import pytest

from database import get_db
from errors import NotFoundError, ValidationError
from reactions import DISLIKE, LIKE, apply_reaction, reaction_counts, viewer_reaction


def _rows(kind, user_id, target_id):
    table, column = {"post": ("post_reactions", "post_id"), "comment": ("comment_reactions", "comment_id")}[kind]
    with get_db() as conn:
        return conn.execute(
            f"SELECT value FROM {table} WHERE user_id = ? AND {column} = ?", (user_id, target_id)
        ).fetchall()


def _expected_state(values):
    state = None
    for v in values:
        state = None if state == v else v
    return state


@pytest.fixture
def target(make_user, make_post, make_comment):
    author = make_user("author")
    post_id = make_post(author)
    comment_id = make_comment(author, post_id)
    return {"post": post_id, "comment": comment_id}


@pytest.mark.parametrize("kind", ["post", "comment"])
def test_first_vote_inserts(make_user, target, kind):
    voter = make_user()
    assert apply_reaction(voter, kind, target[kind], LIKE) == LIKE
    assert _rows(kind, voter, target[kind]) == [(1,)]


@pytest.mark.parametrize("kind", ["post", "comment"])
def test_same_vote_twice_unvotes_and_third_revotes(make_user, target, kind):
    voter = make_user()

    assert apply_reaction(voter, kind, target[kind], DISLIKE) == DISLIKE
    assert apply_reaction(voter, kind, target[kind], DISLIKE) is None
    assert _rows(kind, voter, target[kind]) == []
    assert apply_reaction(voter, kind, target[kind], DISLIKE) == DISLIKE
    assert _rows(kind, voter, target[kind]) == [(-1,)]


@pytest.mark.parametrize("kind", ["post", "comment"])
def test_opposite_vote_flips_in_place(make_user, target, kind):
    voter = make_user()

    apply_reaction(voter, kind, target[kind], LIKE)
    assert apply_reaction(voter, kind, target[kind], DISLIKE) == DISLIKE
    assert _rows(kind, voter, target[kind]) == [(-1,)]
    assert apply_reaction(voter, kind, target[kind], LIKE) == LIKE
    assert _rows(kind, voter, target[kind]) == [(1,)]


@pytest.mark.parametrize("kind", ["post", "comment"])
def test_any_sequence_leaves_at_most_one_row(make_user, target, kind):
    voter = make_user()
    rng = random.Random(7)
    sequences = [list(seq) for seq in itertools.product([LIKE, DISLIKE], repeat=4)]
    sequences.append([rng.choice([LIKE, DISLIKE]) for _ in range(25)])

    for seq in sequences:
        with get_db() as conn:
            conn.execute("DELETE FROM post_reactions")
            conn.execute("DELETE FROM comment_reactions")
            conn.commit()
        for v in seq:
            apply_reaction(voter, kind, target[kind], v)
        rows = _rows(kind, voter, target[kind])
        expected = _expected_state(seq)
        assert len(rows) <= 1
        assert (rows[0][0] if rows else None) == expected
        assert viewer_reaction(voter, kind, target[kind]) == expected


@pytest.mark.parametrize("kind", ["post", "comment"])
@pytest.mark.parametrize("workers", [19, 20])
def test_concurrent_toggles_leave_one_row(make_user, target, kind, workers):
    voter = make_user()
    errors = []
    start = threading.Barrier(workers)

    def toggle():
        try:
            start.wait()
            apply_reaction(voter, kind, target[kind], LIKE)
        except Exception as exc:
            errors.append(exc)

    threads = [threading.Thread(target=toggle) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    rows = _rows(kind, voter, target[kind])
    expected = LIKE if workers % 2 else None
    assert len(rows) <= 1
    assert (rows[0][0] if rows else None) == expected


def test_counts_are_derived_per_target(make_user, target):
    voters = [make_user() for _ in range(4)]
    apply_reaction(voters[0], "post", target["post"], LIKE)
    apply_reaction(voters[1], "post", target["post"], LIKE)
    apply_reaction(voters[2], "post", target["post"], DISLIKE)
    apply_reaction(voters[3], "comment", target["comment"], LIKE)

    assert reaction_counts("post", target["post"]) == (2, 1)
    assert reaction_counts("comment", target["comment"]) == (1, 0)

    apply_reaction(voters[0], "post", target["post"], DISLIKE)
    assert reaction_counts("post", target["post"]) == (1, 2)


def test_post_and_comment_votes_are_independent(make_user, target):
    voter = make_user()
    apply_reaction(voter, "post", target["post"], LIKE)
    apply_reaction(voter, "comment", target["comment"], DISLIKE)

    assert viewer_reaction(voter, "post", target["post"]) == LIKE
    assert viewer_reaction(voter, "comment", target["comment"]) == DISLIKE


@pytest.mark.parametrize("kind,target_id,value", [
    ("thread", 1, 1),
    ("post", 0, 1),
    ("post", -3, 1),
    ("post", "1", 1),
    ("post", 1, 0),
    ("post", 1, 2),
    ("comment", 1, True),
])
def test_invalid_arguments_fail_before_storage(monkeypatch, kind, target_id, value):
    def fail():
        raise AssertionError("storage touched")

    monkeypatch.setattr("reactions.get_db", fail)
    with pytest.raises(ValidationError):
        apply_reaction(1, kind, target_id, value)


def test_missing_target_is_not_found(make_user, db):
    voter = make_user()
    with pytest.raises(NotFoundError):
        apply_reaction(voter, "post", 999, LIKE)
    assert _rows("post", voter, 999) == []


def test_anonymous_viewer_has_no_reaction(target):
    assert viewer_reaction(None, "post", target["post"]) is None
