# repository/corpus_repository.py
import asyncio
import os
from pathlib import Path
from typing import Dict, List, Tuple
from pydantic import ValidationError
from core.entities import ReferenceChunk, ReferenceCorpus
from model.corpus import EmbeddedChunkRecord, SpecCorpusFile
from util.errors import StoreError
from util.timing import timed
import logging

logger = logging.getLogger(__name__)

CORPUS_SUFFIX = ".json"


class CorpusRepository:
    """
    File-backed store of embedded specification corpora, one
    `<data_dir>/<version>.json` per spec version.

    Flow:
    - Serving only reads; ingestion writes out-of-band via save().
    - With caching on, a parsed corpus is reused until the file's
      (mtime_ns, size) changes, so a rewritten corpus is always reloaded.
    """

    def __init__(self, data_dir: str | os.PathLike, cache_enabled: bool = True) -> None:
        self._dir = Path(data_dir)
        self._cache_enabled = cache_enabled
        self._cache: Dict[str, Tuple[Tuple[int, int], ReferenceCorpus]] = {}

    @property
    def data_dir(self) -> Path:
        return self._dir

    def _path(self, version: str) -> Path:
        if not version or "/" in version or "\\" in version or version.startswith("."):
            raise StoreError(f"invalid corpus name: {version!r}")
        return self._dir / f"{version}{CORPUS_SUFFIX}"

    # ---------------- Reads ----------------

    def load(self, version: str) -> ReferenceCorpus:
        path = self._path(version)
        try:
            st = path.stat()
        except FileNotFoundError:
            logger.error("corpus.missing version=%s path=%s", version, path)
            raise StoreError(f"no corpus stored for spec version '{version}'")
        except OSError as e:
            raise StoreError(f"cannot access corpus for '{version}': {e}")

        signature = (st.st_mtime_ns, st.st_size)
        if self._cache_enabled:
            hit = self._cache.get(version)
            if hit is not None and hit[0] == signature:
                return hit[1]

        with timed(logger, "corpus.load", version=version, bytes=st.st_size):
            try:
                raw = path.read_bytes()
            except OSError as e:
                raise StoreError(f"cannot read corpus for '{version}': {e}")
            try:
                doc = SpecCorpusFile.model_validate_json(raw)
            except ValidationError as e:
                logger.error(
                    "corpus.malformed version=%s errors=%d", version, e.error_count()
                )
                raise StoreError(f"corpus for '{version}' is malformed: {e.errors()[0]['msg']}")

            corpus = ReferenceCorpus(
                version=version,
                chunks=[self._to_chunk(version, rec) for rec in doc.chunks],
            )
            # stacked here, inside aload's worker thread; rank_matches reuses it
            corpus.build_matrix()
        logger.info(
            "corpus.loaded version=%s chunks=%d dim=%d",
            version,
            len(corpus),
            corpus.dimension,
        )
        if self._cache_enabled:
            self._cache[version] = (signature, corpus)
        return corpus

    async def aload(self, version: str) -> ReferenceCorpus:
        # File I/O and JSON parsing off the event loop; awaiting stays cancellable.
        return await asyncio.to_thread(self.load, version)

    def list_versions(self) -> List[str]:
        if not self._dir.is_dir():
            logger.warning("corpus.dir.missing path=%s", self._dir)
            return []
        return sorted(p.stem for p in self._dir.glob(f"*{CORPUS_SUFFIX}") if p.is_file())

    # ---------------- Writes (offline) ----------------

    def save(self, corpus: ReferenceCorpus) -> Path:
        path = self._path(corpus.version)
        doc = SpecCorpusFile(
            version=corpus.version,
            chunks=[
                EmbeddedChunkRecord(
                    id=c.id,
                    version=c.version,
                    content=c.content,
                    embedding=list(c.embedding),
                    metadata=dict(c.metadata),
                )
                for c in corpus.chunks
            ],
            count=len(corpus.chunks),
        )
        self._dir.mkdir(parents=True, exist_ok=True)
        tmp = path.parent / (path.name + ".tmp")
        tmp.write_text(doc.model_dump_json(indent=2), encoding="utf-8")
        os.replace(tmp, path)
        self._cache.pop(corpus.version, None)
        logger.info("corpus.saved version=%s chunks=%d", corpus.version, len(corpus))
        return path

    @staticmethod
    def _to_chunk(version: str, rec: EmbeddedChunkRecord) -> ReferenceChunk:
        metadata = dict(rec.metadata)
        # keep optional ingestion fields (file_path, section, ...) visible to callers
        for key, value in (rec.model_extra or {}).items():
            metadata.setdefault(key, value)
        return ReferenceChunk(
            id=rec.id,
            version=rec.version or version,
            content=rec.content,
            embedding=tuple(rec.embedding),
            metadata=metadata,
        )
