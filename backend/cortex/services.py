import uuid
from datetime import datetime
from typing import List, Optional, Tuple

from loguru import logger

from cortex.analysis import analyze_topic
from cortex.analytics import activity_heatmap, upcoming_reviews, weekly_workload
from cortex.models import (
    Advice,
    HeatmapDay,
    Rating,
    Topic,
    UpcomingReview,
    WorkloadDay
)
from cortex.scheduler import (
    clamp_complexity,
    complete_review,
    generate_schedule,
    get_advice,
    next_review_date
)
from cortex.store import topic_store

ANALYSIS_ALERT = "Neural Link disrupted. Analysis failed."

def to_local_naive(moment: Optional[datetime]) -> Optional[datetime]:
    """Schedules are kept in naive local time; aware inputs are converted."""

    if moment is None or moment.tzinfo is None:
        return moment

    return moment.astimezone().replace(tzinfo=None)

async def create_topic_service(
    name: str,
    context: Optional[str] = None,
    exam_date: Optional[datetime] = None,
    now: Optional[datetime] = None
) -> Tuple[Topic, Optional[str]]:
    """
    Orchestrates the creation of a new topic:
    1. Analyzes the topic (or falls back to the default analysis).
    2. Generates the review schedule.
    3. Commits the new collection with the topic at the front.
    Returns the topic and, when the analysis failed, an alert message.
    """

    analysis = await analyze_topic(name, context)

    now = now or datetime.now()
    exam_date = to_local_naive(exam_date)
    complexity = clamp_complexity(analysis.complexity)
    reviews = generate_schedule(complexity, exam_date, now)

    topic = Topic(
        id=str(uuid.uuid4()),
        name=name,
        added_date=now,
        exam_date=exam_date,
        complexity=complexity,
        subtopics=analysis.subtopics,
        summary=analysis.summary,
        reviews=reviews,
        next_review_date=next_review_date(reviews, now),
        mastery=0,
        notes=""
    )

    # Snapshot taken after the await so overlapping creations are all kept.
    topic_store.commit([topic, *topic_store.snapshot()])
    logger.info(f"Topic '{name}' created with complexity {complexity} and {len(reviews)} reviews.")

    return topic, ANALYSIS_ALERT if analysis.fallback else None

def list_topics_service() -> List[Topic]:
    return list(topic_store.snapshot())

def get_topic_service(topic_id: str) -> Topic:
    topic = topic_store.get(topic_id)
    if not topic:
        raise ValueError("Topic not found.")

    return topic

def complete_review_service(
    topic_id: str,
    review_date: datetime,
    rating: Rating,
    now: Optional[datetime] = None
) -> Topic:
    """
    Registers the rating of a review and commits the rescheduled topic.
    A review date that matches nothing returns the topic unchanged.
    """

    topic = get_topic_service(topic_id)
    updated = complete_review(topic, to_local_naive(review_date), rating, now)

    if updated is topic:
        return topic

    topic_store.commit([updated if t.id == topic_id else t for t in topic_store.snapshot()])
    logger.info(f"Review of '{topic.name}' rated {rating.value}, mastery now {updated.mastery}.")

    return updated

def update_notes_service(topic_id: str, notes: str) -> Topic:
    topic = get_topic_service(topic_id)
    updated = topic.model_copy(update={"notes": notes})

    topic_store.commit([updated if t.id == topic_id else t for t in topic_store.snapshot()])

    return updated

def delete_topic_service(topic_id: str) -> bool:
    """Removes a topic for good. Unknown ids are ignored."""

    topics = topic_store.snapshot()
    remaining = [topic for topic in topics if topic.id != topic_id]

    if len(remaining) == len(topics):
        logger.debug(f"Topic {topic_id} already deleted.")
        return False

    topic_store.commit(remaining)
    logger.info(f"Topic {topic_id} deleted.")

    return True

def get_advice_service(topic_id: str) -> Advice:
    return get_advice(get_topic_service(topic_id))

def get_upcoming_reviews_service(now: Optional[datetime] = None) -> List[UpcomingReview]:
    return upcoming_reviews(topic_store.snapshot(), now)

def get_weekly_workload_service(now: Optional[datetime] = None) -> List[WorkloadDay]:
    return weekly_workload(topic_store.snapshot(), now)

def get_activity_heatmap_service(now: Optional[datetime] = None) -> List[HeatmapDay]:
    return activity_heatmap(topic_store.snapshot(), now)
