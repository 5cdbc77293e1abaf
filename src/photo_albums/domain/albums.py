"""Album models persisted as JSON documents."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ContentData(BaseModel):
    """A single photo or video entry of an album."""

    model_config = ConfigDict(populate_by_name=True)

    content_type: str = Field(alias="contentType")
    src: str
    alt: str | None = None
    text: str | None = None
    width: int = 0
    height: int = 0
    timestamp: datetime | None = None

    @property
    def is_image(self) -> bool:
        """Whether the entry is a still image."""
        return self.content_type.startswith("image/")


class Album(BaseModel):
    """An album and the ordered list of contents it owns."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    contents: list[ContentData] = Field(default_factory=list)

    def find_content(self, filename: str) -> ContentData | None:
        """Return the content with the given source filename, if present."""
        for content in self.contents:
            if content.src == filename:
                return content
        return None
