"""Database models"""
from streamflow.models.playlist import Playlist
from streamflow.models.liked_track import LikedTrack
from streamflow.models.history import HistoryEntry, SearchHistoryEntry
from streamflow.models.download import Download, OfflineTrack
from streamflow.models.pending_action import PendingAction
from streamflow.models.setting import Setting

__all__ = [
    "Playlist",
    "LikedTrack",
    "HistoryEntry",
    "SearchHistoryEntry",
    "Download",
    "OfflineTrack",
    "PendingAction",
    "Setting",
]
