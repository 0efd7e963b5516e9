from datetime import datetime
from unittest.mock import patch
import pytest
from sqlalchemy.exc import OperationalError

from streamflow.errors import ConsistencyViolation, NotFound, StoreUnavailable
from streamflow.models.download import Download, OfflineTrack
from streamflow.services.download_service import DownloadService


@pytest.fixture
def service(db):
    return DownloadService(db)


def test_save_writes_both_records(service, make_track):
    track = make_track("x")

    assert service.save_offline_track(track, b"abc") is True

    assert service.is_downloaded(track)
    download = service.get_download("youtube_x")
    assert download.size == 3
    assert download.track["title"] == track.title
    assert service.get_offline_track("youtube_x").blob == b"abc"


def test_save_again_replaces(service, make_track):
    track = make_track("x")
    service.save_offline_track(track, b"abc")
    service.save_offline_track(track, b"abcdef")

    assert len(service.get_downloads()) == 1
    assert service.get_download(track.key).size == 6


def test_failed_save_leaves_neither_record(db, service, make_track):
    track = make_track("x")
    failure = OperationalError("INSERT INTO downloads", {}, Exception("disk I/O error"))

    with patch.object(DownloadService, "_download_record", side_effect=failure):
        with pytest.raises(StoreUnavailable):
            service.save_offline_track(track, b"abc")

    assert db.query(OfflineTrack).count() == 0
    assert db.query(Download).count() == 0


def test_delete_removes_both(db, service, make_track):
    service.save_offline_track(make_track("x"), b"abc")

    service.delete_download("youtube_x")

    assert db.query(OfflineTrack).count() == 0
    assert db.query(Download).count() == 0
    with pytest.raises(NotFound):
        service.delete_download("youtube_x")


def test_get_offline_track_missing(service):
    with pytest.raises(NotFound):
        service.get_offline_track("youtube_nope")


def test_half_written_pair_is_reported(db, service, make_track):
    track = make_track("x")
    db.add(service._offline_record(track, b"abc", datetime(2024, 1, 1)))
    db.commit()

    with pytest.raises(ConsistencyViolation):
        service.get_offline_track(track.key)

    # Orphans can still be deleted
    service.delete_download(track.key)
    assert db.query(OfflineTrack).count() == 0

