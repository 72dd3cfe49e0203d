import logging
import time
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import date, datetime

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ladder.application.config import resolve_config
from ladder.application.factory import Services, build_services
from ladder.application.queue_builder import build_review_queue, load_due_items
from ladder.consts import VERSION
from ladder.domain.errors import InvalidInput, NotFound, StoreUnavailable
from ladder.domain.models import ItemFilter, LearningItem

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("ladder.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    if getattr(app.state, "services", None) is None:
        app.state.services = build_services(resolve_config())
    logger.info(f"ladder server v{VERSION} starting up...")
    yield
    # Shutdown
    logger.info("ladder server shutting down...")


app = FastAPI(
    title="ladder server",
    description="HTTP API for the ladder review scheduler.",
    version=VERSION,
    lifespan=lifespan,
)


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
    logger.error(f"Store unavailable while handling {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": str(exc)})


def _services(request: Request) -> Services:
    return request.app.state.services


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class ScheduleResponse(BaseModel):
    interval_index: int
    next_review_date: date
    last_reviewed_at: datetime | None
    review_count: int
    quality_history: list[int]
    status: str
    ease_factor: float


class ItemResponse(BaseModel):
    id: str
    created_at: datetime
    category: str
    content: dict
    schedule: ScheduleResponse

    @classmethod
    def from_item(cls, item: LearningItem) -> "ItemResponse":
        sched = item.schedule
        return cls(
            id=item.id,
            created_at=item.created_at,
            category=item.category,
            content=item.content,
            schedule=ScheduleResponse(
                interval_index=sched.interval_index,
                next_review_date=sched.next_review_date,
                last_reviewed_at=sched.last_reviewed_at,
                review_count=sched.review_count,
                quality_history=list(sched.quality_history),
                status=sched.status.value,
                ease_factor=sched.ease_factor,
            ),
        )


class ReviewRequest(BaseModel):
    quality: int


class StatsResponse(BaseModel):
    total: int
    new: int
    learning: int
    mastered: int
    suspended: int
    due_today: int
    due_tomorrow: int
    due_within_7_days: int
    accuracy_rate: float
    average_ease: float
    total_reviews: int
    current_streak: int
    longest_streak: int
    last_review_date: date | None


start_time = time.time()


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/stats", response_model=StatsResponse)
async def get_stats(request: Request, category: str | None = None):
    services = _services(request)
    items = await services.store.list_items(ItemFilter(category=category) if category else None)
    stats = services.calculator.compute(items, services.clock.today())
    ledger = await services.ledger.get()
    return StatsResponse(
        **asdict(stats),
        total_reviews=ledger.total_reviews,
        current_streak=ledger.current_streak,
        longest_streak=ledger.longest_streak,
        last_review_date=ledger.last_review_date,
    )


@app.get("/items/due", response_model=list[ItemResponse])
async def get_due_items(request: Request, order: str = "oldest_first", limit: int | None = None):
    """Due items in session order."""
    services = _services(request)
    items = await load_due_items(services.store, services.clock.today())
    try:
        queue = build_review_queue(items, order=order, limit=limit)  # type: ignore[arg-type]
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return [ItemResponse.from_item(item) for item in queue]


@app.post("/items/{item_id}/review", response_model=ItemResponse)
async def review_item(item_id: str, req: ReviewRequest, request: Request):
    """Record one rating for an item."""
    logger.info(f"Review requested via API: {item_id} quality={req.quality}")
    item = await _services(request).recorder.record_review(item_id, req.quality)
    return ItemResponse.from_item(item)


@app.post("/items/{item_id}/suspend", response_model=ItemResponse)
async def suspend_item(item_id: str, request: Request):
    return ItemResponse.from_item(await _services(request).recorder.suspend(item_id))


@app.post("/items/{item_id}/resume", response_model=ItemResponse)
async def resume_item(item_id: str, request: Request):
    return ItemResponse.from_item(await _services(request).recorder.resume(item_id))


@app.post("/items/{item_id}/reset", response_model=ItemResponse)
async def reset_item(item_id: str, request: Request):
    return ItemResponse.from_item(await _services(request).recorder.reset_to_new(item_id))
