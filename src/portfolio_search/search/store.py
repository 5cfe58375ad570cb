"""The finalized, immutable index and its JSON artifact."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

import orjson
from pydantic import ValidationError

from portfolio_search.domain.model import Document, DocumentListAdapter, ImageDocument, TextDocument, is_image


INDEX_CACHE_CONTROL = "public, max-age=3600, immutable"


class IndexLoadError(RuntimeError):
    """Raised when an index artifact cannot be fetched or decoded."""


@dataclass(frozen=True)
class IndexStore:
    """Flat ordered sequence of documents; read-only once built."""

    documents: tuple[Document, ...] = ()

    def __len__(self) -> int:
        return len(self.documents)

    def __iter__(self) -> Iterator[Document]:
        return iter(self.documents)

    @classmethod
    def empty(cls) -> IndexStore:
        return cls(documents=())

    @property
    def text_documents(self) -> list[TextDocument]:
        return [doc for doc in self.documents if not is_image(doc)]

    @property
    def image_documents(self) -> list[ImageDocument]:
        return [doc for doc in self.documents if is_image(doc)]

    def to_json(self) -> bytes:
        payload = [doc.model_dump(mode="json", by_alias=True, exclude_none=True) for doc in self.documents]
        return orjson.dumps(payload)

    def write(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.to_json())
        return path

    @classmethod
    def from_json(cls, payload: bytes | str) -> IndexStore:
        """Decode an artifact; raises :class:`IndexLoadError` on malformed input."""
        try:
            raw = orjson.loads(payload)
        except orjson.JSONDecodeError as exc:
            raise IndexLoadError(f"Index is not valid JSON: {exc}") from exc
        if not isinstance(raw, list):
            raise IndexLoadError("Index must be a JSON array of documents")
        try:
            documents = DocumentListAdapter.validate_python(raw)
        except ValidationError as exc:
            raise IndexLoadError(f"Index contains invalid documents: {exc.error_count()} error(s)") from exc
        return cls(documents=tuple(documents))

    @classmethod
    def read(cls, path: Path) -> IndexStore:
        try:
            payload = path.read_bytes()
        except OSError as exc:
            raise IndexLoadError(f"Unable to read index {path}: {exc}") from exc
        return cls.from_json(payload)
