from datetime import datetime, timedelta
from unittest.mock import patch, AsyncMock

from fastapi.testclient import TestClient

from cortex.scheduler import generate_schedule, next_review_date
from cortex.models import Topic
from main import app

client = TestClient(app)

NOW = datetime(2026, 3, 2, 10, 0, 0)

def make_topic():
    reviews = generate_schedule(5, now=NOW)
    return Topic(
        id="topic-1",
        name="Calculus",
        added_date=NOW,
        complexity=5,
        subtopics=["Limits"],
        reviews=reviews,
        next_review_date=next_review_date(reviews, NOW)
    )

def test_create_topic_rejects_short_name():
    with patch('main.create_topic_service', new=AsyncMock()) as mock_create:
        response = client.post("/topics", json={"name": "ab"})

    assert response.status_code == 422
    mock_create.assert_not_called()

def test_create_topic_returns_alert():
    topic = make_topic()

    with patch('main.create_topic_service', new=AsyncMock(return_value=(topic, "Neural Link disrupted. Analysis failed."))) as mock_create:
        response = client.post("/topics", json={"name": "Calculus", "context": "Exam prep", "examDate": "2026-04-01"})

    assert response.status_code == 200
    body = response.json()
    assert body["alert"] == "Neural Link disrupted. Analysis failed."
    assert body["topic"]["nextReviewDate"] == topic.next_review_date
    assert body["topic"]["reviews"][0]["type"] == "initial"
    assert mock_create.call_args.kwargs["exam_date"] == datetime(2026, 4, 1)

def test_get_topic_not_found():
    with patch('main.get_topic_service', side_effect=ValueError("Topic not found.")):
        response = client.get("/topics/missing")

    assert response.status_code == 404
    assert response.json()["detail"] == "Topic not found."

def test_complete_review_endpoint():
    topic = make_topic()
    review_date = topic.reviews[0].date

    with patch('main.complete_review_service', return_value=topic) as mock_complete:
        response = client.post(
            f"/topics/{topic.id}/reviews/complete",
            json={"date": review_date.isoformat(), "rating": "easy"}
        )

    assert response.status_code == 200
    topic_id, called_date, rating = mock_complete.call_args.args
    assert topic_id == topic.id
    assert called_date == review_date
    assert rating.value == "easy"

def test_complete_review_endpoint_rejects_unknown_rating():
    response = client.post(
        "/topics/topic-1/reviews/complete",
        json={"date": (NOW + timedelta(days=1)).isoformat(), "rating": "meh"}
    )

    assert response.status_code == 422

def test_delete_topic_is_always_no_content():
    with patch('main.delete_topic_service', return_value=False):
        response = client.delete("/topics/already-gone")

    assert response.status_code == 204

def test_retention_curve_endpoint():
    response = client.get("/retention-curve", params={"complexity": 7})

    assert response.status_code == 200
    assert len(response.json()) == 31
    assert response.json()[0] == {"day": 0, "retention": 100.0}

def test_retention_curve_rejects_out_of_range_complexity():
    assert client.get("/retention-curve", params={"complexity": 11}).status_code == 422
    assert client.get("/retention-curve", params={"complexity": 0}).status_code == 422

def test_workload_endpoint():
    with patch('main.get_weekly_workload_service', return_value=[]):
        response = client.get("/dashboard/workload")

    assert response.status_code == 200
    assert response.json() == []
