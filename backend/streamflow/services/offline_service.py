"""Offline service: downloading tracks and replaying actions queued while offline"""
from typing import Any, Awaitable, Callable, Dict, List, Tuple
import asyncio
import logging

from streamflow.database import session_scope
from streamflow.errors import ProviderError, UnknownSource
from streamflow.schemas import Track
from streamflow.services.aggregator import SourceAggregator
from streamflow.services.download_service import DownloadService
from streamflow.services.pending_action_service import PendingActionService

logger = logging.getLogger(__name__)

ActionHandler = Callable[[Any], Awaitable[Any]]


class OfflineService:
    """Service bridging network fetches and the offline collections"""

    def __init__(self, aggregator: SourceAggregator, session_factory=None):
        """
        Initialize offline service

        Args:
            aggregator: Source aggregator used to fetch audio
            session_factory: Session factory for store writes
        """
        self.aggregator = aggregator
        self.session_factory = session_factory

    async def download_track(self, track: Track) -> bool:
        """
        Download a track and save it for offline playback

        The network fetch completes before the store transaction starts.

        Returns:
            True if saved, False if the audio could not be fetched
        """
        try:
            blob = await self.aggregator.download_audio(track)
        except (ProviderError, UnknownSource) as e:
            logger.error(f"Download of {track.key} failed: {e}")
            return False

        return await asyncio.to_thread(self._save, track, blob)

    async def replay_pending_actions(self, handlers: Dict[str, ActionHandler]) -> int:
        """
        Replay queued actions oldest first

        An action is deleted only after its handler succeeds. Replay stops at
        the first failure so later actions never overtake it; actions with no
        handler are left for a later replay.

        Args:
            handlers: Coroutine function per action type, called with the action data

        Returns:
            Number of actions replayed and consumed
        """
        actions = await asyncio.to_thread(self._load_pending_actions)

        replayed = 0
        for action_id, action_type, data in actions:
            handler = handlers.get(action_type)
            if handler is None:
                logger.warning(f"No handler for pending {action_type} action {action_id}, leaving it queued")
                continue
            try:
                await handler(data)
            except Exception as e:
                logger.error(f"Replay of pending {action_type} action {action_id} failed: {e}")
                break

            await asyncio.to_thread(self._delete_pending_action, action_id)
            replayed += 1

        logger.info(f"Replayed {replayed} of {len(actions)} pending actions")
        return replayed

    # Store access, run in worker threads

    def _save(self, track: Track, blob: bytes) -> bool:
        with session_scope(self.session_factory) as db:
            return DownloadService(db).save_offline_track(track, blob)

    def _load_pending_actions(self) -> List[Tuple[int, str, Any]]:
        with session_scope(self.session_factory) as db:
            return [(a.id, a.type, a.data) for a in PendingActionService(db).get_pending_actions()]

    def _delete_pending_action(self, action_id: int) -> None:
        with session_scope(self.session_factory) as db:
            PendingActionService(db).delete_pending_action(action_id)
