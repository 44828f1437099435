from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.api import admin, organizations, releases, tracks, uploads, users
from app.core.config import settings
import traceback
import logging
import uvicorn # For running programmatically
import os # For the PORT variable

# Register every model on Base.metadata before the first request
from app.models import (  # noqa: F401
    user, organization, artist, release, track, split_share,
    qc_item, delivery_job, report_row, audit_log,
)


# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("app")
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

app = FastAPI(title="ReleaseHub API", debug=settings.DEBUG)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Anything that is not an HTTPException ends up here
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    error_detail = traceback.format_exc()
    logger.error(f"Unhandled exception on {request.url.path}: {str(exc)}\n{error_detail}")
    content = {"detail": "Internal server error", "path": request.url.path}
    if settings.DEBUG:
        content["error"] = str(exc)
        content["traceback"] = error_detail
    return JSONResponse(status_code=500, content=content)

# Include routes
app.include_router(users.router, prefix="/api", tags=["users"])
app.include_router(organizations.router, prefix="/api", tags=["organizations"])
app.include_router(releases.router, prefix="/api", tags=["releases"])
app.include_router(tracks.router, prefix="/api", tags=["tracks"])
app.include_router(uploads.router, prefix="/api", tags=["uploads"])
app.include_router(admin.router, prefix="/api", tags=["admin"])


@app.get("/")
async def root():
    return {"message": "Welcome to ReleaseHub API"}


if __name__ == "__main__":
    # For container deployments, use 0.0.0.0 and PORT from environment
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("main:app", host="0.0.0.0", port=port, log_level=settings.LOG_LEVEL.lower())
