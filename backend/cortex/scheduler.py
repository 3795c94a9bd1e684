import math
from datetime import datetime, timedelta
from typing import List, Optional

from loguru import logger

from cortex.models import (
    Advice,
    AdviceVerdict,
    COMPLETED_SENTINEL,
    Rating,
    ReviewSession,
    SessionType,
    Topic
)

MAX_REVIEWS = 20
BASE_MULTIPLIER = 2.5
MIN_MULTIPLIER = 1.3
COMPLEXITY_FACTOR = 0.12

FINAL_REVIEW_MIN_GAP_DAYS = 4
FINAL_REVIEW_LEAD_DAYS = 2

EASY_STRETCH = 1.3

ADVICE_MIN_REVIEWS = 3
HARD_RATIO_LIMIT = 0.4
EASY_RATIO_LIMIT = 0.6

ADVICE_MESSAGES = {
    AdviceVerdict.INSUFFICIENT_DATA: "INSUFFICIENT DATA FOR ANALYSIS.",
    AdviceVerdict.DECOMPOSE: "CRITICAL: High failure rate. Recommendation: Deconstruct topic into smaller sub-modules.",
    AdviceVerdict.WIDEN_INTERVALS: "EFFICIENCY WARNING: Interval density too high. Extending future horizons to prevent over-learning.",
    AdviceVerdict.NOMINAL: "OPTIMAL: Retention curve within expected parameters."
}

ONE_DAY = timedelta(days=1)

def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))

def days_between(start: datetime, end: datetime) -> float:
    """Fractional number of days from `start` to `end`."""

    return (end - start) / ONE_DAY

def clamp_complexity(complexity: int) -> int:
    return max(1, min(10, int(complexity)))

def interval_multiplier(complexity: int) -> float:
    """Higher complexity gives a smaller multiplier, i.e. tighter spacing."""

    return max(MIN_MULTIPLIER, BASE_MULTIPLIER - complexity * COMPLEXITY_FACTOR)

def generate_schedule(
    complexity: int,
    exam_date: Optional[datetime] = None,
    now: Optional[datetime] = None
) -> List[ReviewSession]:
    """
    Builds the initial review timeline for a topic.

    Intervals grow exponentially by a complexity-dependent multiplier,
    starting tomorrow, for at most MAX_REVIEWS sessions. When an exam date
    is given no regular session is placed after it, and a `final` session
    is anchored two days before the exam if the last regular session
    leaves more than FINAL_REVIEW_MIN_GAP_DAYS uncovered.
    """

    now = now or datetime.now()
    multiplier = interval_multiplier(complexity)

    schedule: List[ReviewSession] = []
    interval = 1.0
    cursor = now + ONE_DAY

    for _ in range(MAX_REVIEWS):
        if exam_date is not None and cursor > exam_date:
            break

        schedule.append(ReviewSession(
            date=cursor,
            interval=round_half_up(interval),
            type=SessionType.INITIAL if not schedule else SessionType.STANDARD
        ))

        interval *= multiplier
        try:
            cursor = cursor + timedelta(days=math.ceil(interval))
        except OverflowError:
            # low complexities outgrow datetime.max before MAX_REVIEWS
            break

    if exam_date is None:
        return schedule

    if not schedule:
        schedule.append(ReviewSession(date=exam_date, interval=0, type=SessionType.FINAL))
        return schedule

    last_date = schedule[-1].date
    gap = math.ceil(days_between(last_date, exam_date))

    if gap > FINAL_REVIEW_MIN_GAP_DAYS:
        final_date = exam_date - timedelta(days=FINAL_REVIEW_LEAD_DAYS)
        if final_date > last_date:
            schedule.append(ReviewSession(
                date=final_date,
                interval=gap - FINAL_REVIEW_LEAD_DAYS,
                type=SessionType.FINAL
            ))

    return schedule

def calculate_mastery(reviews: List[ReviewSession]) -> int:
    """Percentage of completed reviews rated good or easy; 0 with none completed."""

    completed = [review for review in reviews if review.completed]
    if not completed:
        return 0

    successful = sum(1 for review in completed if review.rating in (Rating.GOOD, Rating.EASY))

    return round_half_up(100 * successful / len(completed))

def next_review_date(reviews: List[ReviewSession], now: Optional[datetime] = None) -> str:
    now = now or datetime.now()

    for review in reviews:
        if not review.completed and review.date >= now:
            return review.date.isoformat()

    return COMPLETED_SENTINEL

def _sorted_by_date(reviews: List[ReviewSession]) -> List[ReviewSession]:
    return sorted(reviews, key=lambda review: review.date)

def _add_recovery_session(reviews: List[ReviewSession], now: datetime) -> List[ReviewSession]:
    tomorrow = now + ONE_DAY

    # Completed sessions count too: one session per day after a hard rating.
    if any(review.date.date() == tomorrow.date() for review in reviews):
        return reviews

    reviews.append(ReviewSession(date=tomorrow, interval=1, type=SessionType.RECOVERY))

    return _sorted_by_date(reviews)

def _stretch_next_session(reviews: List[ReviewSession], completed_index: int, now: datetime) -> List[ReviewSession]:
    next_index = next(
        (
            index for index, review in enumerate(reviews)
            if index > completed_index and not review.completed and review.type != SessionType.FINAL
        ),
        None
    )
    if next_index is None:
        return reviews

    new_gap = (reviews[next_index].date - now) * EASY_STRETCH
    reviews[next_index] = reviews[next_index].model_copy(update={
        "date": now + new_gap,
        "interval": math.ceil(new_gap / ONE_DAY)
    })

    return _sorted_by_date(reviews)

def complete_review(
    topic: Topic,
    target_date: datetime,
    rating: Rating,
    now: Optional[datetime] = None
) -> Topic:
    """
    Marks the session scheduled at `target_date` as done and adapts the rest
    of the timeline to the rating.

    A `hard` rating inserts a recovery session tomorrow, an `easy` rating
    pushes the next pending non-final session further out, and `good` only
    records the outcome. Mastery and the next review pointer are derived
    again from the resulting list. Returns a new topic; the input is left
    untouched. An unknown or already completed session leaves the topic
    unchanged.
    """

    now = now or datetime.now()

    review_index = next(
        (index for index, review in enumerate(topic.reviews) if review.date == target_date),
        None
    )
    if review_index is None:
        logger.debug(f"No review at {target_date.isoformat()} for topic {topic.id}, nothing to complete.")
        return topic

    if topic.reviews[review_index].completed:
        logger.debug(f"Review at {target_date.isoformat()} for topic {topic.id} is already completed.")
        return topic

    reviews = list(topic.reviews)
    reviews[review_index] = reviews[review_index].model_copy(update={
        "completed": True,
        "rating": rating,
        "completed_date": now
    })

    if rating == Rating.HARD:
        reviews = _add_recovery_session(reviews, now)
    elif rating == Rating.EASY:
        reviews = _stretch_next_session(reviews, review_index, now)

    return topic.model_copy(update={
        "reviews": reviews,
        "mastery": calculate_mastery(reviews),
        "next_review_date": next_review_date(reviews, now)
    })

def get_advice(topic: Topic) -> Advice:
    """Study recommendation from the ratio of hard and easy outcomes."""

    completed = [review for review in topic.reviews if review.completed]
    total = len(completed)

    if total < ADVICE_MIN_REVIEWS:
        verdict = AdviceVerdict.INSUFFICIENT_DATA
    else:
        hard = sum(1 for review in completed if review.rating == Rating.HARD)
        easy = sum(1 for review in completed if review.rating == Rating.EASY)

        if hard / total > HARD_RATIO_LIMIT:
            verdict = AdviceVerdict.DECOMPOSE
        elif easy / total > EASY_RATIO_LIMIT:
            verdict = AdviceVerdict.WIDEN_INTERVALS
        else:
            verdict = AdviceVerdict.NOMINAL

    return Advice(verdict=verdict, message=ADVICE_MESSAGES[verdict])
