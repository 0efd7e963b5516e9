import pytest

from streamflow.database import engine
from streamflow.errors import NotFound, StoreUnavailable
from streamflow.models import Download, LikedTrack, PendingAction, Playlist, SearchHistoryEntry, Setting
from streamflow.services.download_service import DownloadService
from streamflow.services.library_service import LibraryService
from streamflow.services.pending_action_service import PendingActionService
from streamflow.services.playlist_service import PlaylistService
from streamflow.services.settings_service import SettingsService


class TestPendingActions:
    def test_oldest_first(self, db):
        service = PendingActionService(db)
        service.add_pending_action("like", {"key": "youtube_a"})
        service.add_pending_action("playlist_add", {"playlist": 1})
        service.add_pending_action("like", {"key": "youtube_b"})

        assert [a.data for a in service.get_pending_actions("like")] == [{"key": "youtube_a"}, {"key": "youtube_b"}]
        assert [a.type for a in service.get_pending_actions()] == ["like", "playlist_add", "like"]

    def test_delete(self, db):
        service = PendingActionService(db)
        action_id = service.add_pending_action("like")

        service.delete_pending_action(action_id)

        assert service.get_pending_actions() == []
        with pytest.raises(NotFound):
            service.delete_pending_action(action_id)

    def test_clear(self, db):
        service = PendingActionService(db)
        service.add_pending_action("a")
        service.add_pending_action("b")
        assert service.clear_pending_actions() == 2


class TestSettings:
    def test_last_write_wins(self, db):
        service = SettingsService(db)
        service.set_setting("preferences", {"volume": 0.5})
        service.set_setting("preferences", {"volume": 0.8})

        assert service.get_setting("preferences") == {"volume": 0.8}
        assert service.get_all_settings() == {"preferences": {"volume": 0.8}}

    def test_default(self, db):
        assert SettingsService(db).get_setting("missing", 7) == 7

    def test_delete(self, db):
        service = SettingsService(db)
        service.set_setting("theme", "dark")
        service.delete_setting("theme")
        assert service.get_setting("theme") is None
        with pytest.raises(NotFound):
            service.delete_setting("theme")


class TestReadFailures:
    """A failing read surfaces as StoreUnavailable, like a failing write"""

    def test_liked_songs(self, db):
        LikedTrack.__table__.drop(bind=engine)
        with pytest.raises(StoreUnavailable):
            LibraryService(db).get_liked_songs()

    def test_search_history(self, db):
        SearchHistoryEntry.__table__.drop(bind=engine)
        with pytest.raises(StoreUnavailable):
            LibraryService(db).get_search_history()

    def test_playlists(self, db):
        Playlist.__table__.drop(bind=engine)
        with pytest.raises(StoreUnavailable):
            PlaylistService(db).get_playlist(1)

    def test_downloads(self, db):
        Download.__table__.drop(bind=engine)
        with pytest.raises(StoreUnavailable):
            DownloadService(db).get_downloads()

    def test_settings_and_pending_actions(self, db):
        Setting.__table__.drop(bind=engine)
        PendingAction.__table__.drop(bind=engine)
        with pytest.raises(StoreUnavailable):
            SettingsService(db).get_setting("preferences")
        with pytest.raises(StoreUnavailable):
            PendingActionService(db).get_pending_actions()

    def test_session_usable_after_failed_read(self, db):
        LikedTrack.__table__.drop(bind=engine)
        with pytest.raises(StoreUnavailable):
            LibraryService(db).get_liked_songs()

        assert SettingsService(db).get_setting("missing", 1) == 1
