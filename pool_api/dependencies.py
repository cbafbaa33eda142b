"""FastAPI dependencies."""

from fastapi import HTTPException, Request, status

from media_pool import MediaServerPool


def get_pool(request: Request) -> MediaServerPool:
    """Get the pool owned by the running application.

    Raises:
        HTTPException: If the pool has not been set up yet
    """
    pool = getattr(request.app.state, "pool", None)
    if pool is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Media server pool not initialized",
        )
    return pool
