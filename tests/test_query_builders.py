"""Unit tests for the immutable SELECT builder."""

import pytest

from recommender.db import SelectQuery


@pytest.mark.unit
def test_select_all_by_default():
    assert SelectQuery("songs").build() == ("SELECT * FROM songs", ())


@pytest.mark.unit
def test_full_query():
    query, params = (SelectQuery("users_liked_songs")
        .columns("song_id AS id")
        .where("user_id = $1", 10000)
        .where("event_time >= $1", "2024-01-01")
        .order_by("event_time DESC")
        .limit(50)
        .build())

    assert query == (
        "SELECT song_id AS id FROM users_liked_songs "
        "WHERE (user_id = $1) AND (event_time >= $2) "
        "ORDER BY event_time DESC LIMIT 50"
    )
    assert params == (10000, "2024-01-01")


@pytest.mark.unit
def test_where_renumbers_multiple_placeholders():
    query, params = (SelectQuery("songs")
        .where("author_id = $1", "acdc")
        .where("length BETWEEN $1 AND $2", 100, 200)
        .build())

    assert query == "SELECT * FROM songs WHERE (author_id = $1) AND (length BETWEEN $2 AND $3)"
    assert params == ("acdc", 100, 200)


@pytest.mark.unit
def test_where_if_skips_none():
    base = SelectQuery("songs").where("id = $1", 1)

    assert base.where_if(None, "created_at >= $1") == base
    assert base.where_if(5, "length > $1").build()[1] == (1, 5)


@pytest.mark.unit
def test_builder_is_immutable():
    base = SelectQuery("songs")

    base.where("id = $1", 1).limit(3)

    assert base.build() == ("SELECT * FROM songs", ())


@pytest.mark.unit
def test_limit_none_and_negative():
    assert SelectQuery("songs").limit(None).build()[0] == "SELECT * FROM songs"

    with pytest.raises(ValueError):
        SelectQuery("songs").limit(-1)
