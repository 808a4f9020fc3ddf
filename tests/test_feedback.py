# tests/test_feedback.py
import pytest

from crypto_dashboard import credential_store, feedback_store
from crypto_dashboard.errors import ValidationError
from crypto_dashboard.models import Feedback


@pytest.fixture()
def user_id(session):
    _, user = credential_store.register(session, "a@x.com", "Alice", "pw")
    return user.id


@pytest.mark.parametrize("vote", [0, 2, -2, "1", 1.5, True, None])
def test_only_plus_or_minus_one(session, user_id, vote):
    with pytest.raises(ValidationError):
        feedback_store.record(session, user_id, "news", "n-1", vote)
    assert feedback_store.list_for_user(session, user_id) == []

@pytest.mark.parametrize("vote,stored", [(1.0, 1), (-1.0, -1)])
def test_whole_number_floats_count_as_votes(session, user_id, vote, stored):
    feedback_store.record(session, user_id, "news", "n-1", vote)
    [row] = feedback_store.list_for_user(session, user_id)
    assert row.vote == stored and type(row.vote) is int

@pytest.mark.parametrize("content_type,content_id", [(None, "x"), ("", "x"), ("news", None), ("news", "  ")])
def test_content_fields_required(session, user_id, content_type, content_id):
    with pytest.raises(ValidationError):
        feedback_store.record(session, user_id, content_type, content_id, 1)

def test_votes_are_persisted(session, user_id):
    up = feedback_store.record(session, user_id, "news", "n-1", 1)
    down = feedback_store.record(session, user_id, "meme", 42, -1)
    rows = feedback_store.list_for_user(session, user_id)
    assert [r.id for r in rows] == [up, down]
    assert (rows[1].content_type, rows[1].content_id, rows[1].vote) == ("meme", "42", -1)

def test_repeat_votes_are_all_kept(session, user_id):
    feedback_store.record(session, user_id, "news", "n-1", 1)
    feedback_store.record(session, user_id, "news", "n-1", 1)
    feedback_store.record(session, user_id, "news", "n-1", -1)
    assert [r.vote for r in feedback_store.list_for_user(session, user_id)] == [1, 1, -1]


# ---- HTTP ----

def test_post_feedback(client, auth_headers, session):
    r = client.post("/dashboard/feedback", json={"content_type": "insight", "content_id": "today", "vote": -1},
                    headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["message"] == "Feedback saved successfully"

    row = session.get(Feedback, r.json()["id"])
    assert row.vote == -1 and row.content_id == "today"

def test_post_feedback_bad_vote(client, auth_headers):
    r = client.post("/dashboard/feedback", json={"content_type": "news", "content_id": "n-1", "vote": 5},
                    headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "Vote must be 1 or -1"

def test_post_feedback_missing_fields(client, auth_headers):
    r = client.post("/dashboard/feedback", json={"vote": 1}, headers=auth_headers)
    assert r.status_code == 400

def test_post_feedback_float_vote(client, auth_headers):
    r = client.post("/dashboard/feedback", json={"content_type": "meme", "content_id": "m-1", "vote": 1.0},
                    headers=auth_headers)
    assert r.status_code == 200
