"""Playback queue: ordered tracks, a cursor, and shuffle/repeat policy"""
from typing import Callable, Iterable, List, Optional
import enum
import logging
import random
import threading

from streamflow.schemas import QueueSnapshot, Track

logger = logging.getLogger(__name__)

# Going back within this many seconds moves to the previous track
RESTART_THRESHOLD_SECONDS = 3.0

QueueListener = Callable[[QueueSnapshot], None]


class RepeatMode(str, enum.Enum):
    """Repeat policy"""
    NONE = "none"
    ONE = "one"
    ALL = "all"


class Transition(str, enum.Enum):
    """What the player should do after a next/previous decision"""
    MOVE = "move"        # Cursor moved, load the new current track
    RESTART = "restart"  # Replay the current track from the start
    STAY = "stay"        # Nothing to do
    STOP = "stop"        # End of queue, no further automatic playback


class PlaybackQueue:
    """
    In-memory playback queue.

    The cursor is -1 exactly when the queue is empty, otherwise a valid
    index. Every mutation keeps that true and notifies subscribers with a
    fresh QueueSnapshot. Mutations are serialized with a lock.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Initialize queue

        Args:
            rng: Random source for shuffle picks
        """
        self._tracks: List[Track] = []
        self._current_index = -1
        self._shuffle = False
        self._repeat_mode = RepeatMode.NONE
        self._rng = rng or random.Random()
        self._lock = threading.RLock()
        self._listeners: List[QueueListener] = []

    # State

    @property
    def tracks(self) -> List[Track]:
        with self._lock:
            return list(self._tracks)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def shuffle(self) -> bool:
        return self._shuffle

    @property
    def repeat_mode(self) -> RepeatMode:
        return self._repeat_mode

    def __len__(self) -> int:
        return len(self._tracks)

    def current_track(self) -> Optional[Track]:
        with self._lock:
            if self._current_index < 0:
                return None
            return self._tracks[self._current_index]

    def contains(self, track: Track) -> bool:
        with self._lock:
            return any(t.same_as(track) for t in self._tracks)

    def snapshot(self) -> QueueSnapshot:
        with self._lock:
            return QueueSnapshot(
                tracks=tuple(self._tracks),
                current_index=self._current_index,
                shuffle=self._shuffle,
                repeat_mode=self._repeat_mode.value,
            )

    # Mutations

    def add(self, track: Track) -> int:
        """
        Append a track; the first track added to an empty queue becomes current

        Returns:
            Index of the new entry
        """
        with self._lock:
            self._tracks.append(track)
            if self._current_index == -1:
                self._current_index = 0
            logger.info(f"Added to queue: {track.title} by {track.artist}")
            self._notify()
            return len(self._tracks) - 1

    def add_many(self, tracks: Iterable[Track]) -> int:
        """Append several tracks with a single notification"""
        with self._lock:
            added = list(tracks)
            if not added:
                return 0
            self._tracks.extend(added)
            if self._current_index == -1:
                self._current_index = 0
            logger.info(f"Added {len(added)} tracks to queue")
            self._notify()
            return len(added)

    def play_now(self, track: Track) -> int:
        """Append a track and make it current"""
        with self._lock:
            self._tracks.append(track)
            self._current_index = len(self._tracks) - 1
            self._notify()
            return self._current_index

    def select(self, index: int) -> Track:
        """Make the entry at index current"""
        with self._lock:
            self._check_index(index)
            self._current_index = index
            self._notify()
            return self._tracks[index]

    def remove(self, index: int) -> Track:
        """
        Remove the entry at index

        Removing an entry before the cursor shifts the cursor left so it keeps
        pointing at the same track. Removing the current entry leaves the
        cursor in place (now the following track), clamped to the last
        entry, or -1 when the queue becomes empty.

        Returns:
            The removed track
        """
        with self._lock:
            self._check_index(index)
            removed = self._tracks.pop(index)
            if index < self._current_index:
                self._current_index -= 1
            elif self._current_index >= len(self._tracks):
                self._current_index = len(self._tracks) - 1
            logger.info(f"Removed from queue: {removed.title}")
            self._notify()
            return removed

    def reorder(self, from_index: int, to_index: int) -> None:
        """
        Move an entry; the current track's cursor follows it

        Entries between the old and new slot shift by one, and so does the
        cursor when it points into that range.
        """
        with self._lock:
            self._check_index(from_index)
            self._check_index(to_index)
            track = self._tracks.pop(from_index)
            self._tracks.insert(to_index, track)

            current = self._current_index
            if from_index == current:
                self._current_index = to_index
            elif from_index < current <= to_index:
                self._current_index = current - 1
            elif to_index <= current < from_index:
                self._current_index = current + 1

            logger.debug(f"Moved queue entry from {from_index} to {to_index}")
            self._notify()

    def clear(self) -> int:
        with self._lock:
            count = len(self._tracks)
            self._tracks.clear()
            self._current_index = -1
            logger.info(f"Queue cleared ({count} tracks removed)")
            self._notify()
            return count

    # Next / previous

    def advance(self) -> Transition:
        """
        Decide what plays after the current track (track end or "next")

        Repeat-one replays the current track; shuffle picks uniformly among
        the other entries; otherwise the cursor moves forward, wrapping only
        with repeat-all.
        """
        with self._lock:
            if not self._tracks:
                return Transition.STOP

            if self._repeat_mode == RepeatMode.ONE:
                return Transition.RESTART

            if self._shuffle:
                if len(self._tracks) <= 1:
                    return Transition.STOP
                candidates = [i for i in range(len(self._tracks)) if i != self._current_index]
                self._current_index = self._rng.choice(candidates)
            elif self._current_index < len(self._tracks) - 1:
                self._current_index += 1
            elif self._repeat_mode == RepeatMode.ALL:
                self._current_index = 0
            else:
                return Transition.STOP

            self._notify()
            return Transition.MOVE

    def previous(self, elapsed_seconds: float = 0.0) -> Transition:
        """
        Decide what "previous" does

        More than three seconds into a track restarts it; otherwise the
        cursor steps back, unless it is already at the first entry.
        """
        with self._lock:
            if not self._tracks:
                return Transition.STAY
            if elapsed_seconds > RESTART_THRESHOLD_SECONDS:
                return Transition.RESTART
            if self._current_index > 0:
                self._current_index -= 1
                self._notify()
                return Transition.MOVE
            return Transition.STAY

    # Modes

    def set_shuffle(self, enabled: bool) -> None:
        with self._lock:
            self._shuffle = bool(enabled)
            self._notify()

    def toggle_shuffle(self) -> bool:
        with self._lock:
            self.set_shuffle(not self._shuffle)
            return self._shuffle

    def set_repeat_mode(self, mode) -> None:
        with self._lock:
            self._repeat_mode = RepeatMode(mode)
            self._notify()

    def cycle_repeat_mode(self) -> RepeatMode:
        """none -> one -> all -> none"""
        modes = list(RepeatMode)
        with self._lock:
            self.set_repeat_mode(modes[(modes.index(self._repeat_mode) + 1) % len(modes)])
            return self._repeat_mode

    # Observers

    def subscribe(self, listener: QueueListener) -> Callable[[], None]:
        """
        Register a listener called with a snapshot after every change

        Returns:
            A function that unregisters the listener
        """
        if listener not in self._listeners:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Error in queue change listener")

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._tracks):
            raise IndexError(f"Queue index {index} out of range (queue has {len(self._tracks)} tracks)")
