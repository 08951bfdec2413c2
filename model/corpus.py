# model/corpus.py
from typing import Any
from pydantic import BaseModel, ConfigDict, Field, model_validator


class EmbeddedChunkRecord(BaseModel):
    """One persisted reference passage. Unknown keys (file_path, section) are kept."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)
    version: str | None = None
    content: str
    embedding: list[float] = Field(min_length=1)
    metadata: dict[str, Any] = Field(default_factory=dict)


class SpecCorpusFile(BaseModel):
    """On-disk layout of `<version>.json`."""

    version: str
    chunks: list[EmbeddedChunkRecord] = Field(default_factory=list)
    count: int | None = None

    @model_validator(mode="after")
    def _check_shape(self) -> "SpecCorpusFile":
        if self.count is not None and self.count != len(self.chunks):
            raise ValueError(
                f"count={self.count} does not match {len(self.chunks)} chunks"
            )
        dims = {len(c.embedding) for c in self.chunks}
        if len(dims) > 1:
            raise ValueError(f"embeddings have mixed dimensions: {sorted(dims)}")
        ids = [c.id for c in self.chunks]
        if len(set(ids)) != len(ids):
            raise ValueError("chunk ids must be unique within a version")
        return self
