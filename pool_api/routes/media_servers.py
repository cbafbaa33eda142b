"""Media server pool monitoring and management routes."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from media_pool import InvalidNodeURLError, MediaServerPool
from pool_api.auth import require_api_token
from pool_api.dependencies import get_pool
from pool_api.schemas import (
    AddServerRequest,
    AddServerResponse,
    MediaServerOut,
    PoolStatsResponse,
    RemoveServerResponse,
    ScalingRecommendationOut,
    SelectionPolicy,
    SelectionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_api_token)])


@router.get("/", response_model=List[MediaServerOut])
async def list_servers(pool: MediaServerPool = Depends(get_pool)):
    """Get all media servers and their last known stats."""
    return [MediaServerOut.from_node(node) for node in pool.get_all_servers()]


@router.get("/stats", response_model=PoolStatsResponse)
async def get_pool_stats(pool: MediaServerPool = Depends(get_pool)):
    """Get pool statistics and scaling recommendation.

    Args:
        pool: Media server pool.

    Returns:
        PoolStatsResponse: Aggregates, recommendation and capacity flag.
    """
    stats = pool.get_pool_stats()
    recommendation = pool.advisor.recommend(stats)

    return PoolStatsResponse(
        total_servers=stats.total_servers,
        healthy_servers=stats.healthy_servers,
        unhealthy_servers=stats.unhealthy_servers,
        total_active_streams=stats.total_active_streams,
        average_cpu_usage=stats.average_cpu_usage,
        average_memory_usage=stats.average_memory_usage,
        servers=[MediaServerOut.from_node(node) for node in stats.servers],
        recommendation=ScalingRecommendationOut(
            action=recommendation.action, message=recommendation.message
        ),
        has_capacity=pool.has_capacity(),
    )


@router.post("/select", response_model=SelectionResponse)
async def select_server(
    policy: SelectionPolicy = Query(SelectionPolicy.LEAST_CONNECTIONS),
    pool: MediaServerPool = Depends(get_pool),
):
    """Select a server for a new stream.

    Args:
        policy: Selection policy.
        pool: Media server pool.

    Returns:
        SelectionResponse: Chosen server.

    Raises:
        HTTPException: 503 if no healthy server is available.
    """
    if policy == SelectionPolicy.ROUND_ROBIN:
        server = pool.select_server_round_robin()
    else:
        server = pool.select_server()

    if server is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="No media servers available: all media servers are unhealthy or pool is empty",
        )

    return SelectionResponse(
        server_id=server.id,
        url=server.url,
        host=server.host,
        active_streams=server.active_streams,
        policy=policy,
    )


@router.get("/{server_id}", response_model=MediaServerOut)
async def get_server(server_id: str, pool: MediaServerPool = Depends(get_pool)):
    """Get a specific server's stats."""
    server = pool.get_server(server_id)
    if server is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Server not found")
    return MediaServerOut.from_node(server)


@router.post("/", response_model=AddServerResponse, status_code=status.HTTP_201_CREATED)
async def add_server(data: AddServerRequest, pool: MediaServerPool = Depends(get_pool)):
    """Add a media server to the pool (hot-add, no restart needed).

    Args:
        data: Server URL.
        pool: Media server pool.

    Returns:
        AddServerResponse: The registered server.

    Raises:
        HTTPException: 400 if the URL is malformed.
    """
    try:
        server_id = pool.add_server(data.url)
    except InvalidNodeURLError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    return AddServerResponse(
        message="Media server added successfully",
        server=MediaServerOut.from_node(pool.get_server(server_id)),
    )


@router.delete("/{server_id}", response_model=RemoveServerResponse)
async def remove_server(server_id: str, pool: MediaServerPool = Depends(get_pool)):
    """Remove a media server from the pool."""
    if not pool.remove_server(server_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Server not found")

    return RemoveServerResponse(message="Media server removed successfully", server_id=server_id)
