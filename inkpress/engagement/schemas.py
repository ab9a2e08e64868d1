"""Response schemas shared by every likeable entity."""

from pydantic import BaseModel

from inkpress.engagement.models import LikeToggle


class LikeResponse(BaseModel):
    """Result of a like toggle."""

    message: str
    liked: bool
    like_count: int

    @classmethod
    def from_toggle(cls, toggle: LikeToggle, noun: str) -> "LikeResponse":
        verb = "liked" if toggle.liked else "unliked"
        return cls(
            message=f"{noun} {verb}",
            liked=toggle.liked,
            like_count=toggle.like_count,
        )
