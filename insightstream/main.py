"""
FastAPI main application for InsightStream.
Provides REST API endpoints to refresh, analyze, filter and inspect the
intelligence feed, and to edit the keyword and subscription settings.
"""

import logging
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import List, Optional, Dict, Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
import uvicorn

from insightstream import __version__
from insightstream.models import Category, KeywordConfig, SubscriptionConfig
from insightstream.filters import FilterCriteria, SHOW_ALL, apply_filters
from insightstream.stats import collection_stats
from insightstream.db.item_store import get_item_store
from insightstream.db.settings_store import get_settings_store
from insightstream.ai.analysis_cache import get_analysis_cache
from insightstream.orchestrator import get_aggregator
from insightstream.utils.config import settings

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# Pydantic models for API requests and responses
class KeywordModel(BaseModel):
    """A search keyword bound to a category."""
    id: str = Field(..., description="Keyword id")
    term: str = Field(..., min_length=1, description="Search term")
    category: Category = Field(..., description="Category the term belongs to")


class SubscriptionModel(BaseModel):
    """A subscribed feed source."""
    id: str = Field(..., description="Subscription id")
    name: str = Field(..., min_length=1, description="Display name, used as item source")
    url: str = Field(..., min_length=1, description="Feed URL")


class RefreshRequestModel(BaseModel):
    """Request model for a refresh. Omitted fields use the stored settings."""
    keywords: Optional[List[str]] = Field(default=None, description="Search terms")
    subscriptions: Optional[List[SubscriptionModel]] = Field(default=None, description="Subscriptions to poll")


class ItemListModel(BaseModel):
    """Response model for item listings."""
    total_results: int
    items: List[Dict[str, Any]]


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    items: int
    timestamp: datetime


# Application lifecycle
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting InsightStream API...")
    store = get_item_store()
    logger.info(f"Item store ready with {len(store)} items")

    yield

    logger.info("Shutting down InsightStream API...")


# Create FastAPI application
app = FastAPI(
    title="InsightStream API",
    description="Food delivery market intelligence feed with AI analysis",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", response_model=Dict[str, str])
async def root():
    """Root endpoint with API information."""
    return {
        "message": "InsightStream API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        items=len(get_item_store()),
        timestamp=datetime.now()
    )


@app.get("/items", response_model=ItemListModel)
async def list_items(
    category: str = Query(default=SHOW_ALL, description="Category, or ALL"),
    query: Optional[str] = Query(default=None, description="Text to find in title or snippet"),
    date_from: Optional[date] = Query(default=None, description="First day to include"),
    date_to: Optional[date] = Query(default=None, description="Last day to include")
) -> ItemListModel:
    """
    List items matching the active filters, newest batch first.
    """
    if category != SHOW_ALL and category not in Category.__members__:
        raise HTTPException(status_code=400, detail=f"Unknown category: {category}")

    if date_from and date_to and date_from > date_to:
        raise HTTPException(status_code=400, detail="date_from must not be after date_to")

    criteria = FilterCriteria(
        category=category,
        query=query,
        date_from=date_from,
        date_to=date_to
    )
    items = apply_filters(get_item_store().snapshot(), criteria)

    return ItemListModel(
        total_results=len(items),
        items=[item.to_dict() for item in items]
    )


@app.post("/refresh", response_model=ItemListModel)
async def refresh_feed(request: Optional[RefreshRequestModel] = None) -> ItemListModel:
    """
    Run one refresh cycle and return the newly merged items.
    """
    request = request or RefreshRequestModel()
    settings_store = get_settings_store()

    keywords = request.keywords
    if keywords is None:
        keywords = settings_store.get_search_terms()

    if request.subscriptions is None:
        subscriptions = settings_store.get_subscriptions()
    else:
        subscriptions = [SubscriptionConfig(**s.model_dump()) for s in request.subscriptions]

    inserted = await get_aggregator().refresh(keywords, subscriptions)

    return ItemListModel(
        total_results=len(inserted),
        items=[item.to_dict() for item in inserted]
    )


@app.post("/items/{item_id}/analyze", response_model=Dict[str, Any])
async def analyze_item(item_id: str) -> Dict[str, Any]:
    """
    Attach AI analysis to an item. Items already analyzed are returned as is.
    """
    try:
        item = await get_analysis_cache().ensure_analyzed_by_id(item_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Item not found: {item_id}")

    return item.to_dict()


@app.get("/stats", response_model=Dict[str, Any])
async def get_feed_stats():
    """
    Get category counts and the sentiment breakdown of analyzed items.
    """
    stats = collection_stats(get_item_store().snapshot())
    stats["last_updated"] = datetime.now().isoformat()
    return stats


@app.get("/settings/keywords", response_model=List[KeywordModel])
async def get_keywords():
    return [KeywordModel(**k.to_dict()) for k in get_settings_store().get_keywords()]


@app.put("/settings/keywords", response_model=List[KeywordModel])
async def update_keywords(keywords: List[KeywordModel]):
    """Replace the configured search keywords."""
    configs = [KeywordConfig(id=k.id, term=k.term.strip(), category=k.category) for k in keywords]
    get_settings_store().set_keywords(configs)
    return [KeywordModel(**k.to_dict()) for k in configs]


@app.get("/settings/subscriptions", response_model=List[SubscriptionModel])
async def get_subscriptions():
    return [SubscriptionModel(**s.to_dict()) for s in get_settings_store().get_subscriptions()]


@app.put("/settings/subscriptions", response_model=List[SubscriptionModel])
async def update_subscriptions(subscriptions: List[SubscriptionModel]):
    """Replace the configured feed subscriptions."""
    configs = [SubscriptionConfig(**s.model_dump()) for s in subscriptions]
    get_settings_store().set_subscriptions(configs)
    return [SubscriptionModel(**s.to_dict()) for s in configs]


# Error handlers
@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """Handle HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.detail,
            "status_code": exc.status_code,
            "timestamp": datetime.now().isoformat()
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """Handle general exceptions."""
    logger.error(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "status_code": 500,
            "timestamp": datetime.now().isoformat()
        }
    )


if __name__ == "__main__":
    uvicorn.run(
        "insightstream.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
