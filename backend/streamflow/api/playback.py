"""Playback API endpoints"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from streamflow.api.deps import get_player
from streamflow.schemas import Track
from streamflow.services.playback_service import PlaybackEvent, PlayerService
from streamflow.services.queue_service import RepeatMode

router = APIRouter(prefix="/api/playback", tags=["playback"])


class PlaybackStateResponse(BaseModel):
    current_track: Track | None
    stream_url: str | None
    is_playing: bool
    position: float
    duration: float
    volume: float
    queue_index: int
    queue_length: int
    shuffle: bool
    repeat_mode: RepeatMode


class PlayTrackRequest(BaseModel):
    track: Track
    add_to_queue: bool = True


class PlaybackEventRequest(BaseModel):
    type: PlaybackEvent
    value: float | None = None


class SeekRequest(BaseModel):
    fraction: float


class SetVolumeRequest(BaseModel):
    volume: float


class SetShuffleRequest(BaseModel):
    enabled: bool


class SetRepeatRequest(BaseModel):
    mode: RepeatMode


@router.get("/state", response_model=PlaybackStateResponse)
def get_playback_state(player: PlayerService = Depends(get_player)):
    """Commanded playback state (the client plays the stream URL)"""
    return player.state()


@router.post("/play-track", response_model=PlaybackStateResponse)
async def play_track(request: PlayTrackRequest, player: PlayerService = Depends(get_player)):
    """Play a track now"""
    if not await player.play_track(request.track, add_to_queue=request.add_to_queue):
        raise HTTPException(status_code=502, detail=f"Failed to play '{request.track.key}'")
    return player.state()


@router.post("/play", response_model=PlaybackStateResponse)
async def play(player: PlayerService = Depends(get_player)):
    """Start or resume playback"""
    await player.play()
    return player.state()


@router.post("/pause", response_model=PlaybackStateResponse)
def pause(player: PlayerService = Depends(get_player)):
    player.pause()
    return player.state()


@router.post("/next", response_model=PlaybackStateResponse)
async def next_track(player: PlayerService = Depends(get_player)):
    await player.next()
    return player.state()


@router.post("/previous", response_model=PlaybackStateResponse)
async def previous_track(player: PlayerService = Depends(get_player)):
    await player.previous()
    return player.state()


@router.post("/events", response_model=PlaybackStateResponse)
async def report_event(request: PlaybackEventRequest, player: PlayerService = Depends(get_player)):
    """Time, duration, ended and error events reported by the client"""
    await player.handle_event(request.type, request.value)
    return player.state()


@router.post("/seek", response_model=PlaybackStateResponse)
def seek(request: SeekRequest, player: PlayerService = Depends(get_player)):
    player.seek(request.fraction)
    return player.state()


@router.post("/volume", response_model=PlaybackStateResponse)
def set_volume(request: SetVolumeRequest, player: PlayerService = Depends(get_player)):
    """Set volume (clamped to 0-1) and remember it"""
    player.set_volume(request.volume)
    player.save_preferences()
    return player.state()


@router.post("/shuffle", response_model=PlaybackStateResponse)
def set_shuffle(request: SetShuffleRequest, player: PlayerService = Depends(get_player)):
    player.queue.set_shuffle(request.enabled)
    player.save_preferences()
    return player.state()


@router.post("/repeat", response_model=PlaybackStateResponse)
def set_repeat(request: SetRepeatRequest, player: PlayerService = Depends(get_player)):
    player.queue.set_repeat_mode(request.mode)
    player.save_preferences()
    return player.state()
