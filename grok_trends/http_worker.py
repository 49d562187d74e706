#!/usr/bin/env python3
"""
HTTP Worker - Receives scheduled trends fetches from Cloud Scheduler via HTTP POST
"""

import logging
from datetime import datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from grok_trends.config import TrendsConfig
from grok_trends.dependencies import get_auto_draft_config_service, get_clock, get_config, get_fetch_orchestrator
from grok_trends.exceptions import InvalidCategoryError
from grok_trends.models.story import Category
from grok_trends.pipeline.prompts import resolve_category

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(title="TechBlit Grok Trends Worker")

# Categories that only run inside business hours
BUSINESS_HOURS_CATEGORIES = {Category.BREAKING_NEWS}


class ScheduledFetchRequest(BaseModel):
    """Request model for a scheduled fetch"""
    category: Optional[str] = None


def within_business_hours(now: datetime, config: TrendsConfig) -> bool:
    start, end = config.breaking_news_hours
    local = now.astimezone(ZoneInfo(config.schedule_timezone))
    return start <= local.hour < end


@app.get("/health")
async def health_check():
    """Health check endpoint for Cloud Run"""
    return {"status": "healthy", "service": "grok-trends-worker"}


@app.post("/scheduled-fetch")
def scheduled_fetch(
    request: ScheduledFetchRequest,
    config: TrendsConfig = Depends(get_config),
    clock: Callable[[], datetime] = Depends(get_clock),
    auto_draft_service=Depends(get_auto_draft_config_service),
    orchestrator=Depends(get_fetch_orchestrator),
):
    """
    Run the fetch for one category - called by Cloud Scheduler

    The auto-draft settings are read fresh on every call, so edits take
    effect on the next run.
    """
    category = resolve_category(request.category)
    if category is None:
        raise HTTPException(status_code=400, detail={"status": "failed", "error": f"Invalid category: {request.category}"})

    if category in BUSINESS_HOURS_CATEGORIES and not within_business_hours(clock(), config):
        logger.info(f"Skipping {category.value} fetch outside business hours")
        return {"status": "skipped_outside_hours", "category": category.value}

    logger.info(f"Received scheduled fetch for {category.value}")

    try:
        auto_draft = auto_draft_service.get()
        result = orchestrator.run_scheduled_fetch(category, auto_draft)
    except InvalidCategoryError as e:
        raise HTTPException(status_code=400, detail={"status": "failed", "error": str(e)})
    except Exception as e:
        error_msg = str(e)
        logger.error(f"Scheduled fetch for {category.value} failed: {error_msg}")
        raise HTTPException(
            status_code=500,
            detail={
                "status": "failed",
                "category": category.value,
                "error": error_msg
            }
        )

    logger.info(f"Scheduled fetch for {category.value} completed: {result.to_dict()}")
    return {
        "status": "success",
        "result": result.to_dict()
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
