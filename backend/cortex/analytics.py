"""
Dashboard projections over the topic collection.

Every function here is read-only and recomputes its result from the
snapshot it receives; nothing is cached between calls.
"""

import math
from collections import Counter
from datetime import datetime, timedelta, date
from typing import Dict, List, Optional, Sequence

from cortex.models import HeatmapDay, RetentionPoint, Topic, UpcomingReview, WorkloadDay
from cortex.scheduler import days_between

WORKLOAD_DAYS = 7
HEAVY_DAY_THRESHOLD = 3
HEATMAP_DAYS = 60
RETENTION_HORIZON_DAYS = 30
RETENTION_BASE_STABILITY = 15

def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)

def upcoming_reviews(topics: Sequence[Topic], now: Optional[datetime] = None) -> List[UpcomingReview]:
    """
    Nearest pending review of each topic, from today's midnight onwards,
    ordered by how many days away it is.
    """

    today = start_of_day(now or datetime.now())
    upcoming = []

    for topic in topics:
        session = next(
            (review for review in topic.reviews if not review.completed and review.date >= today),
            None
        )
        if session is None:
            continue

        upcoming.append(UpcomingReview(
            topic_id=topic.id,
            topic_name=topic.name,
            date=session.date,
            days_away=math.ceil(days_between(today, session.date)),
            type=session.type
        ))

    # sorted() is stable, ties keep collection order
    return sorted(upcoming, key=lambda entry: entry.days_away)

def weekly_workload(topics: Sequence[Topic], now: Optional[datetime] = None) -> List[WorkloadDay]:
    """Pending reviews per calendar day for today and the next six days."""

    today = start_of_day(now or datetime.now())
    counts = [0] * WORKLOAD_DAYS

    for topic in topics:
        for review in topic.reviews:
            if review.completed:
                continue

            offset = (start_of_day(review.date) - today).days
            if 0 <= offset < WORKLOAD_DAYS:
                counts[offset] += 1

    workload = []
    for offset, count in enumerate(counts):
        day = today + timedelta(days=offset)
        workload.append(WorkloadDay(
            date=day.date(),
            day_name=day.strftime("%a"),
            count=count,
            is_heavy=count > HEAVY_DAY_THRESHOLD
        ))

    return workload

def heatmap_intensity(count: int) -> int:
    if count > 8:
        return 4
    if count > 5:
        return 3
    if count > 2:
        return 2
    if count > 0:
        return 1
    return 0

def activity_heatmap(
    topics: Sequence[Topic],
    now: Optional[datetime] = None,
    days: int = HEATMAP_DAYS
) -> List[HeatmapDay]:
    """
    Completed reviews per day over a trailing window that ends today,
    oldest day first. Records without a completion timestamp fall back to
    their scheduled date.
    """

    today = (now or datetime.now()).date()
    counts: Dict[date, int] = Counter()

    for topic in topics:
        for review in topic.reviews:
            if review.completed:
                counts[(review.completed_date or review.date).date()] += 1

    grid = []
    for days_ago in range(days - 1, -1, -1):
        day = today - timedelta(days=days_ago)
        count = counts[day]
        grid.append(HeatmapDay(date=day, count=count, intensity=heatmap_intensity(count)))

    return grid

def retention_curve(complexity: int = 5) -> List[RetentionPoint]:
    """Projected forgetting curve R(t) = 100 * e^(-t / (15 - complexity))."""

    stability = RETENTION_BASE_STABILITY - complexity

    return [
        RetentionPoint(day=day, retention=100 * math.exp(-day / stability))
        for day in range(RETENTION_HORIZON_DAYS + 1)
    ]
