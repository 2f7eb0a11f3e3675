import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.models import ErrorResponse
from src.api.routes.jira import router as jira_router
from src.api.routes.media import router as media_router
from src.api.routes.zoom import router as zoom_router
from src.config import settings
from src.errors import QuotaExceededError, SubmissionError
from src.meetings.zoom import ZoomAPIError
from src.tracker.jira import JiraAPIError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Meeting Task Sync API",
    description="Turns meeting recordings, screenshots and clips into Jira tasks",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
    ],
    allow_origin_regex=r"https://.*\.vercel\.app|http://localhost:\d+",
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(media_router)
app.include_router(jira_router)
app.include_router(zoom_router)


def _error(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


@app.exception_handler(SubmissionError)
async def submission_error_handler(request: Request, exc: SubmissionError) -> JSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    quota = True if isinstance(exc, QuotaExceededError) else None
    return _error(exc.status_code, ErrorResponse(error=exc.message, quota_exceeded=quota))


@app.exception_handler(JiraAPIError)
async def jira_error_handler(request: Request, exc: JiraAPIError) -> JSONResponse:
    # Only the Jira endpoints let these escape; reconciliation absorbs them per item.
    logger.error("%s %s: Jira returned %d", request.method, request.url.path, exc.status_code)
    status_code = exc.status_code if exc.status_code >= 400 else 502
    return _error(
        status_code,
        ErrorResponse(error=f"Jira request failed: {exc.status_code}", details=exc.body),
    )


@app.exception_handler(ZoomAPIError)
async def zoom_error_handler(request: Request, exc: ZoomAPIError) -> JSONResponse:
    logger.error("%s %s: Zoom returned %d", request.method, request.url.path, exc.status_code)
    return _error(500, ErrorResponse(error="Zoom connection failed", details=exc.body))


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
