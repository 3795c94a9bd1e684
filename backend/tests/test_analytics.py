import math
import pytest
from datetime import datetime, timedelta, date

from cortex.analytics import (
    activity_heatmap,
    heatmap_intensity,
    retention_curve,
    upcoming_reviews,
    weekly_workload
)
from cortex.models import Rating, ReviewSession, SessionType, Topic

NOW = datetime(2026, 3, 2, 10, 0, 0)
TODAY = datetime(2026, 3, 2)

def pending(moment, session_type=SessionType.STANDARD):
    return ReviewSession(date=moment, interval=1, type=session_type)

def done(moment, completed_date=None):
    return ReviewSession(
        date=moment,
        completed=True,
        completed_date=completed_date,
        interval=1,
        type=SessionType.STANDARD,
        rating=Rating.GOOD
    )

def make_topic(topic_id, reviews):
    return Topic(
        id=topic_id,
        name=f"Topic {topic_id}",
        added_date=NOW - timedelta(days=90),
        complexity=5,
        reviews=reviews,
        next_review_date="Completed"
    )

def test_upcoming_reviews_sorted_by_days_away():
    topics = [
        make_topic("a", [pending(NOW + timedelta(days=5))]),
        make_topic("b", [pending(NOW + timedelta(days=1))]),
        make_topic("c", [done(NOW - timedelta(days=1))]),
        make_topic("d", [pending(TODAY + timedelta(hours=8), SessionType.RECOVERY)]),
    ]

    upcoming = upcoming_reviews(topics, now=NOW)

    assert [entry.topic_id for entry in upcoming] == ["d", "b", "a"]
    assert [entry.days_away for entry in upcoming] == [1, 2, 6]
    assert upcoming[0].type == SessionType.RECOVERY
    assert upcoming[0].topic_name == "Topic d"

def test_upcoming_reviews_skips_overdue_sessions():
    topic = make_topic("a", [
        pending(NOW - timedelta(days=2)),
        pending(TODAY),
        pending(NOW + timedelta(days=3))
    ])

    upcoming = upcoming_reviews([topic], now=NOW)

    assert len(upcoming) == 1
    assert upcoming[0].date == TODAY
    assert upcoming[0].days_away == 0

def test_upcoming_reviews_ties_keep_collection_order():
    topics = [
        make_topic("first", [pending(NOW + timedelta(days=2))]),
        make_topic("second", [pending(NOW + timedelta(days=2, hours=1))]),
    ]

    upcoming = upcoming_reviews(topics, now=NOW)

    assert [entry.topic_id for entry in upcoming] == ["first", "second"]

def test_upcoming_reviews_empty_collection():
    assert upcoming_reviews([], now=NOW) == []

def test_weekly_workload_buckets():
    topic = make_topic("a", [
        pending(NOW - timedelta(days=1)),
        done(NOW),
        pending(TODAY + timedelta(hours=15)),
        pending(NOW + timedelta(days=6)),
        pending(NOW + timedelta(days=7)),
    ])

    workload = weekly_workload([topic], now=NOW)

    assert len(workload) == 7
    assert [day.count for day in workload] == [1, 0, 0, 0, 0, 0, 1]
    assert workload[0].date == date(2026, 3, 2)
    assert workload[0].day_name == "Mon"
    assert workload[6].date == date(2026, 3, 8)

def test_weekly_workload_heavy_day():
    tomorrow = NOW + timedelta(days=1)
    in_two_days = NOW + timedelta(days=2)
    topics = [
        make_topic("a", [pending(tomorrow), pending(in_two_days)]),
        make_topic("b", [pending(tomorrow), pending(in_two_days)]),
        make_topic("c", [pending(tomorrow), pending(in_two_days)]),
        make_topic("d", [pending(tomorrow)]),
    ]

    workload = weekly_workload(topics, now=NOW)

    assert workload[1].count == 4
    assert workload[1].is_heavy
    assert workload[2].count == 3
    assert not workload[2].is_heavy

def test_activity_heatmap_window():
    topic = make_topic("a", [
        done(NOW - timedelta(days=70), completed_date=NOW - timedelta(days=61)),
        done(NOW - timedelta(days=60), completed_date=NOW - timedelta(days=60)),
        done(NOW - timedelta(days=59), completed_date=NOW - timedelta(days=59)),
    ])

    heatmap = activity_heatmap([topic], now=NOW)

    assert len(heatmap) == 60
    assert heatmap[0].date == date(2026, 3, 2) - timedelta(days=59)
    assert heatmap[-1].date == date(2026, 3, 2)
    assert heatmap[0].count == 1
    assert sum(day.count for day in heatmap) == 1

def test_activity_heatmap_uses_completion_day():
    topic = make_topic("a", [
        done(NOW + timedelta(days=4), completed_date=NOW - timedelta(days=1)),
        done(NOW - timedelta(days=3)),
        pending(NOW - timedelta(days=2)),
    ])

    heatmap = activity_heatmap([topic], now=NOW)

    assert heatmap[-2].count == 1
    assert heatmap[-4].count == 1
    assert heatmap[-3].count == 0

def test_activity_heatmap_busy_day_has_max_intensity():
    topic = make_topic("a", [done(NOW - timedelta(days=10), completed_date=NOW - timedelta(minutes=m)) for m in range(9)])

    heatmap = activity_heatmap([topic], now=NOW)

    assert heatmap[-1].count == 9
    assert heatmap[-1].intensity == 4

@pytest.mark.parametrize("count, intensity", [
    (0, 0), (1, 1), (2, 1), (3, 2), (5, 2), (6, 3), (8, 3), (9, 4), (40, 4)
])
def test_heatmap_intensity(count, intensity):
    assert heatmap_intensity(count) == intensity

def test_retention_curve():
    curve = retention_curve(5)

    assert len(curve) == 31
    assert curve[0].day == 0
    assert curve[0].retention == 100
    assert abs(curve[10].retention - 100 * math.exp(-1)) < 0.0001
    assert all(later.retention < earlier.retention for earlier, later in zip(curve, curve[1:]))

def test_retention_curve_decays_faster_for_complex_topics():
    assert retention_curve(9)[10].retention < retention_curve(2)[10].retention
    assert retention_curve()[30].retention == retention_curve(5)[30].retention
