from typing import Any
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Track(BaseModel):
    """
    A playable item normalized from a catalog record.
    Two tracks are the same track when their ids match.
    """
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    title: str = Field(..., min_length=1)
    artist: str
    album_art_url: str | None = None
    audio_url: str = Field(..., min_length=1)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Track):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @classmethod
    def from_catalog(cls, record: dict[str, Any]) -> "Track":
        """Build a Track from a raw Deezer track record"""
        return cls(
            id=record["id"],
            title=record["title_short"],
            artist=record["artist"]["name"],
            album_art_url=(record.get("album") or {}).get("cover_medium"),
            audio_url=record["preview"],
        )

    def to_storage(self) -> dict[str, Any]:
        """Camel-case mapping used for persisted playlists"""
        return self.model_dump(by_alias=True)
