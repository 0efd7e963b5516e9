from datetime import datetime, timedelta
import pytest

from streamflow.errors import NotFound
from streamflow.models.history import HistoryEntry, SearchHistoryEntry
from streamflow.services.library_service import LibraryService


@pytest.fixture
def service(db):
    return LibraryService(db, retention_days=30)


class TestLikes:
    def test_toggle_twice_restores_state(self, service, make_track):
        track = make_track("x")

        assert service.toggle_like(track) is True
        assert service.is_liked(track) is True
        assert service.toggle_like(track) is False
        assert service.is_liked(track) is False
        assert service.get_liked_songs() == []

    def test_liked_songs_store_track_copy(self, service, make_track):
        service.toggle_like(make_track("x", title="Hello", artist="Adele"))

        [liked] = service.get_liked_songs()
        assert liked.id == "youtube_x"
        track = liked.to_track()
        assert (track.title, track.artist, track.source) == ("Hello", "Adele", "youtube")

    def test_same_id_different_source_are_distinct(self, service, make_track):
        service.toggle_like(make_track("x"))
        assert service.is_liked(make_track("x", source="audius")) is False


class TestHistory:
    def test_history_most_recent_first(self, service, make_track):
        for i in range(3):
            service.add_to_history(make_track(f"t{i}"))
        service.add_to_history(make_track("t0"))

        history = service.get_play_history()
        assert [h.track_key for h in history] == ["youtube_t0", "youtube_t2", "youtube_t1", "youtube_t0"]

    def test_history_limit(self, service, make_track):
        for i in range(5):
            service.add_to_history(make_track(f"t{i}"))
        assert len(service.get_play_history(limit=2)) == 2

    def test_clear_history(self, service, make_track):
        service.add_to_history(make_track("a"))
        assert service.clear_history() == 1
        assert service.get_play_history() == []


class TestSearchHistory:
    def test_dedup_keeps_most_recent_occurrence(self, service):
        for query in ["a", "b", "a", "c"]:
            service.add_to_search_history(query)

        assert [e.query for e in service.get_search_history()] == ["c", "a", "b"]

    def test_limit(self, service):
        for i in range(15):
            service.add_to_search_history(f"q{i}")
        assert len(service.get_search_history()) == 10
        assert len(service.get_search_history(limit=3)) == 3

    def test_remove_entry(self, service):
        entry_id = service.add_to_search_history("a")
        service.remove_from_search_history(entry_id)
        assert service.get_search_history() == []
        with pytest.raises(NotFound):
            service.remove_from_search_history(entry_id)

    def test_clear(self, service):
        service.add_to_search_history("a")
        service.add_to_search_history("b")
        assert service.clear_search_history() == 2


class TestCleanup:
    def test_removes_entries_older_than_retention(self, db, service, make_track):
        now = datetime(2024, 6, 1, 12, 0, 0)
        old = now - timedelta(days=31)
        boundary = now - timedelta(days=30)
        recent = now - timedelta(days=1)

        db.add_all([
            HistoryEntry(track_key="youtube_old", timestamp=old, **HistoryEntry.track_values(make_track("old"))),
            HistoryEntry(track_key="youtube_edge", timestamp=boundary, **HistoryEntry.track_values(make_track("edge"))),
            HistoryEntry(track_key="youtube_new", timestamp=recent, **HistoryEntry.track_values(make_track("new"))),
            SearchHistoryEntry(query="old", timestamp=old),
            SearchHistoryEntry(query="new", timestamp=recent),
        ])
        db.commit()

        assert service.cleanup(now=now) == (2, 1)
        assert [h.track_key for h in service.get_play_history()] == ["youtube_new"]
        assert [s.query for s in service.get_search_history()] == ["new"]

    def test_nothing_to_remove(self, service, make_track):
        service.add_to_history(make_track("a"))
        assert service.cleanup() == (0, 0)
