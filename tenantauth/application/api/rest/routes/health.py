"""Health check endpoint."""

from fastapi import APIRouter, Request

router = APIRouter(prefix="/api/v1", tags=["health"])


@router.get("/health")
async def health(request: Request) -> dict:
    return {
        "status": "healthy",
        "version": request.app.version,
    }
