"""Track columns shared by every table that stores a copy of a track"""
from sqlalchemy import Column, String, Float

from streamflow.schemas import Track


class TrackColumns:
    """Mixin holding the fields of a Track value (tracks are stored denormalized)"""

    track_id = Column(String, nullable=False)  # Id within the source catalog
    title = Column(String, nullable=False)
    artist = Column(String, nullable=False, default="")
    thumbnail = Column(String, nullable=True)
    duration = Column(Float, default=0)  # Seconds
    source = Column(String, nullable=False)
    url = Column(String, nullable=False, default="")

    @staticmethod
    def track_values(track: Track) -> dict:
        """Column values for a Track"""
        return {
            "track_id": track.id,
            "title": track.title,
            "artist": track.artist,
            "thumbnail": track.thumbnail,
            "duration": track.duration,
            "source": track.source,
            "url": track.url,
        }

    def to_track(self) -> Track:
        return Track(
            id=self.track_id,
            title=self.title,
            artist=self.artist or "",
            thumbnail=self.thumbnail,
            duration=self.duration or 0,
            source=self.source,
            url=self.url or "",
        )
