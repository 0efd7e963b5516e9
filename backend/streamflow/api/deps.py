"""Dependencies resolving the long-lived components built in the app lifespan"""
from fastapi import Request

from streamflow.services.aggregator import SourceAggregator
from streamflow.services.offline_service import OfflineService
from streamflow.services.playback_service import PlayerService
from streamflow.services.queue_service import PlaybackQueue
from streamflow.services.response_cache import ResponseCache


def get_cache(request: Request) -> ResponseCache:
    return request.app.state.cache


def get_aggregator(request: Request) -> SourceAggregator:
    return request.app.state.aggregator


def get_queue(request: Request) -> PlaybackQueue:
    return request.app.state.queue


def get_player(request: Request) -> PlayerService:
    return request.app.state.player


def get_offline(request: Request) -> OfflineService:
    return request.app.state.offline
