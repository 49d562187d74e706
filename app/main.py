import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.grok_trends import router as grok_trends_router
from app.responses import error_response
from grok_trends.config import get_trends_config
from grok_trends.exceptions import (
    CompletionError,
    DraftGenerationError,
    InvalidTransitionError,
    StoryNotFoundError,
    TrendsError,
)

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="TechBlit Grok Trends API",
    description="Admin API for curating trending tech stories into blog drafts",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_trends_config().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(grok_trends_router, prefix="/grok-trends", tags=["grok-trends"])


def status_for(error: Exception) -> int:
    if isinstance(error, StoryNotFoundError):
        return 404
    if isinstance(error, InvalidTransitionError):
        return 409
    if isinstance(error, (CompletionError, DraftGenerationError)):
        return 500
    if isinstance(error, ValueError):
        return 400
    return 500


@app.exception_handler(TrendsError)
async def trends_error_handler(request: Request, exc: TrendsError):
    code = status_for(exc)
    if code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    details = {"error": str(exc)}
    if isinstance(exc, InvalidTransitionError):
        details.update({"currentStatus": exc.current, "requestedStatus": exc.requested})
    return error_response(str(exc), code, details)


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return error_response(str(exc), 400)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [{"loc": list(error["loc"]), "message": error["msg"]} for error in exc.errors()]
    return error_response("Invalid request", 400, {"errors": errors})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    response = error_response(str(exc.detail), exc.status_code)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return error_response("Internal server error", 500, {"error": str(exc)})


@app.get("/health")
def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
