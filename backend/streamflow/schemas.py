"""Value types shared by the aggregator, the queue and the store"""
from pydantic import BaseModel, ConfigDict, field_validator
from typing import Any, Dict, Optional, Tuple


def track_key(source: str, track_id: str) -> str:
    """Composite identity string used as a primary key: '<source>_<id>'"""
    return f"{source}_{track_id}"


class Track(BaseModel):
    """A playable audio item, identified by (source, id)"""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    title: str
    artist: str = ""
    thumbnail: Optional[str] = None
    duration: float = 0
    source: str
    url: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # Some catalogs use numeric ids
        if isinstance(value, int):
            return str(value)
        return value

    @property
    def key(self) -> str:
        return track_key(self.source, self.id)

    def same_as(self, other: "Track") -> bool:
        """True if both tracks are the same logical item"""
        return self.source == other.source and self.id == other.id

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump()


class QueueSnapshot(BaseModel):
    """Immutable view of the queue emitted to observers after each mutation"""

    model_config = ConfigDict(frozen=True)

    tracks: Tuple[Track, ...] = ()
    current_index: int = -1
    shuffle: bool = False
    repeat_mode: str = "none"

    @property
    def current_track(self) -> Optional[Track]:
        if self.current_index < 0:
            return None
        return self.tracks[self.current_index]
