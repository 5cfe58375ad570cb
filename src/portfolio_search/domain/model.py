"""Domain model - the two searchable document shapes.

Documents are value objects: they are created once while the index is
built and never change afterwards. Both variants serialize to the exact
JSON shape of the published ``search-index.json`` artifact, so the same
models are used for writing the artifact and for loading it back.
"""

import re
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


TEXT_DOCUMENT_TYPES = ("projects", "sections", "pages")
IMAGE_DOCUMENT_TYPE = "image"

_LEADING_INT = re.compile(r"^\s*[+-]?\d+")


class TextDocument(BaseModel):
    """A content entry or routed page, indexed by its stripped body text."""

    model_config = ConfigDict(frozen=True)

    type: Literal["projects", "sections", "pages"]
    title: str
    url: str
    text: str = ""
    keywords: list[str] = Field(default_factory=list)
    description: str = ""

    @property
    def identity(self) -> str:
        return self.url or self.title

    def parsed_year(self) -> int:
        return 0


class ImageDocument(BaseModel):
    """One image, de-duplicated across every listing that references it.

    ``text`` is the synthesized blob (title, description, artist, keywords,
    year, section) that all matchers search uniformly. ``appears_on`` holds
    the listing routes in first-seen order.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: Literal["image"] = IMAGE_DOCUMENT_TYPE
    title: str
    url: str = ""
    text: str = ""
    keywords: list[str] = Field(default_factory=list)
    year: str | int | None = None
    artist: str = ""
    section: str = ""
    description: str = ""
    slug: str | None = None
    stem: str | None = None
    thumb: str | None = None
    sale: str = "PRIVATE"
    width: int | None = None
    height: int | None = None
    ar: float | None = None
    rows: int | None = None
    appears_on: list[str] = Field(default_factory=list, alias="appearsOn")

    @property
    def identity(self) -> str:
        return self.url or (self.slug or self.stem or "").lower() or self.title

    @property
    def identity_key(self) -> str:
        """Case-folded slug, falling back to the filename stem."""
        return (self.slug or self.stem or "").lower()

    def parsed_year(self) -> int:
        """Integer prefix of ``year``; anything unparseable counts as 0."""
        if self.year is None:
            return 0
        if isinstance(self.year, int):
            return self.year
        match = _LEADING_INT.match(self.year)
        return int(match.group(0)) if match else 0


Document = Annotated[TextDocument | ImageDocument, Field(discriminator="type")]

DocumentListAdapter: TypeAdapter[list[Document]] = TypeAdapter(list[Document])


def is_image(document: TextDocument | ImageDocument) -> bool:
    return document.type == IMAGE_DOCUMENT_TYPE
