import uvicorn
import sys

from fastapi import (
    FastAPI,
    HTTPException,
    Query,
    Response
)

from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from typing import List

from cortex.analytics import retention_curve
from cortex.config import CORS_ORIGINS, LOG_LEVEL
from cortex.models import (
    Advice,
    HeatmapDay,
    NotesUpdate,
    RetentionPoint,
    ReviewCompletion,
    Topic,
    TopicCreate,
    TopicCreateResponse,
    UpcomingReview,
    WorkloadDay
)

from cortex.services import (
    create_topic_service,
    list_topics_service,
    get_topic_service,
    complete_review_service,
    update_notes_service,
    delete_topic_service,
    get_advice_service,
    get_upcoming_reviews_service,
    get_weekly_workload_service,
    get_activity_heatmap_service
)
from cortex.store import topic_store

logger.remove()
logger.add(sys.stderr, level=LOG_LEVEL)

app = FastAPI()

@app.on_event("startup")
def on_startup():
    topic_store.load()

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)

@app.get("/topics", response_model=List[Topic])
async def get_all_topics_api():
    """
    Returns every topic, most recently added first.
    """
    return list_topics_service()

@app.post("/topics", response_model=TopicCreateResponse)
async def create_topic_api(payload: TopicCreate):
    """
    Analyzes a new topic, generates its review schedule and stores it.
    An analysis failure still creates the topic and is reported in `alert`.
    """

    topic, alert = await create_topic_service(
        name=payload.name,
        context=payload.context,
        exam_date=payload.exam_date
    )
    return TopicCreateResponse(topic=topic, alert=alert)

@app.get("/topics/{topic_id}", response_model=Topic)
async def get_topic_api(topic_id: str):
    try:
        return get_topic_service(topic_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

@app.delete("/topics/{topic_id}", status_code=204)
async def delete_topic_api(topic_id: str):
    """
    Deletes a topic. Deleting an unknown topic is not an error.
    """
    delete_topic_service(topic_id)
    return Response(status_code=204)

@app.post("/topics/{topic_id}/reviews/complete", response_model=Topic)
async def complete_review_endpoint(topic_id: str, completion: ReviewCompletion):
    """
    Endpoint that registers how a review felt and reschedules the topic.
    """

    try:
        return complete_review_service(topic_id, completion.date, completion.rating)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error registering review: {e}")

@app.put("/topics/{topic_id}/notes", response_model=Topic)
async def update_notes_endpoint(topic_id: str, update: NotesUpdate):
    try:
        return update_notes_service(topic_id, update.notes)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

@app.get("/topics/{topic_id}/advice", response_model=Advice)
async def get_advice_endpoint(topic_id: str):
    try:
        return get_advice_service(topic_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

@app.get("/dashboard/upcoming", response_model=List[UpcomingReview])
async def get_upcoming_reviews_endpoint():
    """
    Endpoint that returns the nearest pending review of each topic.
    """
    return get_upcoming_reviews_service()

@app.get("/dashboard/workload", response_model=List[WorkloadDay])
async def get_weekly_workload_endpoint():
    return get_weekly_workload_service()

@app.get("/dashboard/heatmap", response_model=List[HeatmapDay])
async def get_activity_heatmap_endpoint():
    return get_activity_heatmap_service()

@app.get("/retention-curve", response_model=List[RetentionPoint])
async def get_retention_curve_endpoint(complexity: int = Query(5, ge=1, le=10)):
    """
    Projected forgetting curve for a complexity, for display only.
    """
    return retention_curve(complexity)

if __name__ == "__main__":
    logger.info("Initializing FastAPI backend with Uvicorn...")
    try:
        uvicorn.run(app, host="127.0.0.1", port=8000, log_level="info")
    except Exception as e:
        logger.error(f"Error initializing Uvicorn: {e}")
        sys.exit(1)
