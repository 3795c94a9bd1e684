from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import datetime, date
from typing import List, Optional

COMPLETED_SENTINEL = "Completed"

class CamelModel(BaseModel):
    """Base model persisted and served with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class Rating(str, Enum):
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"

class SessionType(str, Enum):
    INITIAL = "initial"
    STANDARD = "standard"
    FINAL = "final"
    RECOVERY = "recovery"

class ReviewSession(CamelModel):
    date: datetime
    completed: bool = False
    completed_date: Optional[datetime] = None
    interval: int
    type: SessionType
    rating: Optional[Rating] = None

class Topic(CamelModel):
    id: str
    name: str
    added_date: datetime
    exam_date: Optional[datetime] = None
    complexity: int
    subtopics: List[str] = []
    summary: str = ""
    reviews: List[ReviewSession] = []
    next_review_date: str
    mastery: int = 0
    notes: str = ""

class TopicAnalysis(BaseModel):
    complexity: int
    subtopics: List[str]
    summary: str
    fallback: bool = False

class TopicCreate(CamelModel):
    name: str = Field(min_length=3)
    context: Optional[str] = None
    exam_date: Optional[datetime] = None

class TopicCreateResponse(CamelModel):
    topic: Topic
    alert: Optional[str] = None

class ReviewCompletion(CamelModel):
    date: datetime
    rating: Rating

class NotesUpdate(CamelModel):
    notes: str

class AdviceVerdict(str, Enum):
    INSUFFICIENT_DATA = "insufficient_data"
    DECOMPOSE = "decompose"
    WIDEN_INTERVALS = "widen_intervals"
    NOMINAL = "nominal"

class Advice(CamelModel):
    verdict: AdviceVerdict
    message: str

class UpcomingReview(CamelModel):
    topic_id: str
    topic_name: str
    date: datetime
    days_away: int
    type: SessionType

class WorkloadDay(CamelModel):
    date: date
    day_name: str
    count: int = 0
    is_heavy: bool = False

class HeatmapDay(CamelModel):
    date: date
    count: int
    intensity: int

class RetentionPoint(CamelModel):
    day: int
    retention: float
