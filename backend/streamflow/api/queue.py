"""Queue API endpoints"""
from fastapi import APIRouter, Depends, HTTPException
from typing import List
from pydantic import BaseModel

from streamflow.api.deps import get_queue
from streamflow.schemas import QueueSnapshot, Track
from streamflow.services.queue_service import PlaybackQueue

router = APIRouter(prefix="/api/queue", tags=["queue"])


class ReorderQueueRequest(BaseModel):
    from_index: int
    to_index: int


class SelectQueueRequest(BaseModel):
    index: int


class AddToQueueRequest(BaseModel):
    tracks: List[Track]


def _not_found(error: IndexError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(error))


@router.get("", response_model=QueueSnapshot)
def get_queue_snapshot(queue: PlaybackQueue = Depends(get_queue)):
    """Current queue with the cursor and shuffle/repeat modes"""
    return queue.snapshot()


@router.post("", response_model=QueueSnapshot)
def add_to_queue(request: AddToQueueRequest, queue: PlaybackQueue = Depends(get_queue)):
    """Append tracks to the queue"""
    queue.add_many(request.tracks)
    return queue.snapshot()


@router.put("/order", response_model=QueueSnapshot)
def reorder_queue(request: ReorderQueueRequest, queue: PlaybackQueue = Depends(get_queue)):
    """Move one entry; the current track keeps being current"""
    try:
        queue.reorder(request.from_index, request.to_index)
    except IndexError as e:
        raise _not_found(e) from e
    return queue.snapshot()


@router.post("/select", response_model=QueueSnapshot)
def select_queue_entry(request: SelectQueueRequest, queue: PlaybackQueue = Depends(get_queue)):
    try:
        queue.select(request.index)
    except IndexError as e:
        raise _not_found(e) from e
    return queue.snapshot()


@router.delete("/{index}", response_model=QueueSnapshot)
def remove_from_queue(index: int, queue: PlaybackQueue = Depends(get_queue)):
    """Remove the entry at a position"""
    try:
        queue.remove(index)
    except IndexError as e:
        raise _not_found(e) from e
    return queue.snapshot()


@router.delete("", response_model=QueueSnapshot)
def clear_queue(queue: PlaybackQueue = Depends(get_queue)):
    queue.clear()
    return queue.snapshot()
