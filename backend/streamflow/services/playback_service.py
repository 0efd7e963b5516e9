"""Playback service: drives a playback backend from the queue"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import asyncio
import enum
import logging

from streamflow.database import session_scope
from streamflow.errors import ProviderError, StoreUnavailable, UnknownSource
from streamflow.schemas import Track
from streamflow.services.aggregator import SourceAggregator
from streamflow.services.library_service import LibraryService
from streamflow.services.queue_service import PlaybackQueue, RepeatMode, Transition
from streamflow.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

PREFERENCES_KEY = "preferences"


class PlaybackEvent(str, enum.Enum):
    """Events reported by a playback backend"""
    TIME_UPDATE = "time_update"
    DURATION_CHANGE = "duration_change"
    ENDED = "ended"
    ERROR = "error"


class PlaybackBackend(ABC):
    """Audio output capability; events are fed back to PlayerService.handle_event"""

    @abstractmethod
    def load(self, url: str) -> None: ...

    @abstractmethod
    def play(self) -> None: ...

    @abstractmethod
    def pause(self) -> None: ...

    @abstractmethod
    def seek(self, fraction: float) -> None: ...

    @abstractmethod
    def set_volume(self, volume: float) -> None: ...


class ClientPlaybackBackend(PlaybackBackend):
    """
    Backend for a remote client that does the actual audio output.

    Records the commanded state; the client polls it and reports
    time/duration/ended/error events back over the API.
    """

    def __init__(self):
        self.url: Optional[str] = None
        self.is_playing = False
        self.seek_fraction: Optional[float] = None
        self.volume = 1.0

    def load(self, url: str) -> None:
        self.url = url
        self.is_playing = False
        self.seek_fraction = None

    def play(self) -> None:
        self.is_playing = True

    def pause(self) -> None:
        self.is_playing = False

    def seek(self, fraction: float) -> None:
        self.seek_fraction = fraction

    def set_volume(self, volume: float) -> None:
        self.volume = volume


class PlayerService:
    """Service coordinating the queue, stream resolution, playback and history"""

    def __init__(self, queue: PlaybackQueue, aggregator: SourceAggregator,
                 backend: PlaybackBackend, session_factory=None):
        """
        Initialize player

        Args:
            queue: Playback queue
            aggregator: Source aggregator (stream URL resolution)
            backend: Audio output
            session_factory: Session factory for history and preference writes
        """
        self.queue = queue
        self.aggregator = aggregator
        self.backend = backend
        self.session_factory = session_factory
        self.current_track: Optional[Track] = None
        self.stream_url: Optional[str] = None
        self.is_playing = False
        self.position = 0.0  # Seconds
        self.duration = 0.0
        self.volume = 1.0
        self._ended_handled = False
        self._lock = asyncio.Lock()

    async def play_track(self, track: Track, add_to_queue: bool = True) -> bool:
        """
        Start playing a track

        Args:
            track: Track to play
            add_to_queue: Append it to the queue and make it current

        Returns:
            True if playback started
        """
        async with self._lock:
            return await self._start(track, add_to_queue)

    async def play(self) -> bool:
        """Resume, or start the current queue entry if nothing is loaded"""
        async with self._lock:
            if self.stream_url:
                self.backend.play()
                self.is_playing = True
                return True
            track = self.queue.current_track()
            if track is None:
                logger.warning("Nothing to play: queue is empty")
                return False
            return await self._start(track, add_to_queue=False)

    def pause(self) -> None:
        self.backend.pause()
        self.is_playing = False

    async def toggle_play_pause(self) -> bool:
        if self.is_playing:
            self.pause()
            return False
        return await self.play()

    async def next(self) -> Transition:
        """Advance according to shuffle/repeat policy"""
        async with self._lock:
            return await self._apply(self.queue.advance())

    async def previous(self) -> Transition:
        """Restart the current track or step back (3-second rule)"""
        async with self._lock:
            return await self._apply(self.queue.previous(self.position))

    async def handle_event(self, event: PlaybackEvent, value: Optional[float] = None) -> None:
        """
        Process an event from the backend

        Args:
            event: Event type
            value: Position (time_update) or duration (duration_change) in seconds
        """
        event = PlaybackEvent(event)
        if event == PlaybackEvent.TIME_UPDATE:
            self.position = float(value or 0)
        elif event == PlaybackEvent.DURATION_CHANGE:
            self.duration = float(value or 0)
        elif event == PlaybackEvent.ENDED:
            if self._ended_handled:
                logger.debug("Ignoring repeated ended event")
                return
            self._ended_handled = True
            await self.next()
        elif event == PlaybackEvent.ERROR:
            logger.error(f"Playback error on {self.current_track.key if self.current_track else 'nothing'}, trying next track")
            await self.next()

    def seek(self, fraction: float) -> None:
        """Seek to a fraction of the track (ignored until the duration is known)"""
        if not self.duration:
            return
        fraction = max(0.0, min(1.0, fraction))
        self.backend.seek(fraction)
        self.position = self.duration * fraction

    def set_volume(self, volume: float) -> float:
        self.volume = max(0.0, min(1.0, volume))
        self.backend.set_volume(self.volume)
        return self.volume

    def adjust_volume(self, delta: float) -> float:
        return self.set_volume(self.volume + delta)

    def load_preferences(self) -> None:
        """Restore volume, shuffle and repeat mode from settings"""
        with session_scope(self.session_factory) as db:
            prefs = SettingsService(db).get_setting(PREFERENCES_KEY) or {}
        self.set_volume(prefs.get("volume", 1.0))
        self.queue.set_shuffle(prefs.get("shuffle", False))
        try:
            self.queue.set_repeat_mode(prefs.get("repeat", RepeatMode.NONE.value))
        except ValueError:
            logger.warning(f"Ignoring invalid stored repeat mode {prefs.get('repeat')!r}")

    def save_preferences(self) -> None:
        with session_scope(self.session_factory) as db:
            SettingsService(db).set_setting(PREFERENCES_KEY, {
                "volume": self.volume,
                "shuffle": self.queue.shuffle,
                "repeat": self.queue.repeat_mode.value,
            })

    def state(self) -> Dict[str, Any]:
        snapshot = self.queue.snapshot()
        return {
            "current_track": self.current_track.to_record() if self.current_track else None,
            "stream_url": self.stream_url,
            "is_playing": self.is_playing,
            "position": self.position,
            "duration": self.duration,
            "volume": self.volume,
            "queue_index": snapshot.current_index,
            "queue_length": len(snapshot.tracks),
            "shuffle": snapshot.shuffle,
            "repeat_mode": snapshot.repeat_mode,
        }

    async def _apply(self, transition: Transition) -> Transition:
        if transition == Transition.MOVE:
            track = self.queue.current_track()
            if not await self._start(track, add_to_queue=False):
                self._unload(track)
        elif transition == Transition.RESTART:
            self._restart()
        elif transition == Transition.STOP:
            self.pause()
            logger.info("Reached end of queue")
        return transition

    def _unload(self, track: Track) -> None:
        """Point at the new current track without a stream, paused"""
        self.backend.pause()
        self.current_track = track
        self.stream_url = None
        self.is_playing = False
        self.position = 0.0
        self.duration = track.duration or 0.0
        self._ended_handled = False

    def _restart(self) -> None:
        self.backend.seek(0.0)
        self.backend.play()
        self.position = 0.0
        self.is_playing = True
        self._ended_handled = False

    async def _start(self, track: Track, add_to_queue: bool) -> bool:
        # Resolve before touching any state or store
        try:
            url = await self.aggregator.get_stream_url(track)
        except (ProviderError, UnknownSource) as e:
            logger.error(f"Failed to play {track.key}: {e}")
            return False

        if add_to_queue:
            self.queue.play_now(track)

        self.backend.load(url)
        self.current_track = track
        self.stream_url = url
        self.position = 0.0
        self.duration = track.duration or 0.0
        self._ended_handled = False
        self.backend.play()
        self.is_playing = True
        logger.info(f"Playing {track.title} by {track.artist} ({track.source})")

        # Store I/O stays off the event loop
        await asyncio.to_thread(self._record_play, track)
        return True

    def _record_play(self, track: Track) -> None:
        try:
            with session_scope(self.session_factory) as db:
                LibraryService(db).add_to_history(track)
        except StoreUnavailable as e:
            logger.error(f"Could not record play of {track.key}: {e}")
