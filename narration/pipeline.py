from __future__ import annotations

import logging
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from .chunker import ChunkBuilder, TextChunk
from .config import DEFAULT_CATALOG, PipelineConfig, VoiceCatalog
from .errors import CollaboratorError, StagingIOError
from .merger import concatenate_audio_files
from .metadata import MetadataBuilder
from .progress import NullProgress, ProgressObserver
from .scheduler import SynthesisScheduler
from .split_text import split_into_sentences
from .tts_engine import TtsEngine

logger = logging.getLogger(__name__)

__all__ = ["PipelineResult", "NarrationPipeline"]


@dataclass
class PipelineResult:
    output_path: Optional[Path]
    chunks: List[TextChunk] = field(default_factory=list)
    chunk_bytes: List[int] = field(default_factory=list)
    total_bytes: int = 0
    elapsed_sec: float = 0.0


class NarrationPipeline:
    """
    Splits text into chunks, synthesizes them concurrently and joins the audio.

    Chunk audio is staged in a temporary directory that lives only for the
    duration of :meth:`run` and is removed whether the run succeeds or not.
    """

    def __init__(
        self,
        engine: TtsEngine,
        config: PipelineConfig,
        *,
        catalog: VoiceCatalog = DEFAULT_CATALOG,
        progress_factory: Callable[[], ProgressObserver] = NullProgress,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        config.validate()
        catalog.validate(config.voice, config.language)
        self.engine = engine
        self.config = config
        self.catalog = catalog
        self.progress_factory = progress_factory
        self._sleep = sleep

    def split(self, text: str) -> List[TextChunk]:
        sentences = split_into_sentences(text)
        chunks = ChunkBuilder(self.config.max_chunk_chars).build_chunks(sentences)
        logger.info(
            "Split %d characters into %d sentence(s) and %d chunk(s).",
            len(text),
            len(sentences),
            len(chunks),
        )
        return chunks

    def run(self, text: str, output_path: Path) -> PipelineResult:
        started = time.monotonic()
        chunks = self.split(text)
        if not chunks:
            logger.warning("No text to synthesize; no output written.")
            return PipelineResult(output_path=None)

        output_path = Path(output_path)
        scheduler = SynthesisScheduler(self.config.concurrency, progress=self.progress_factory())
        work_dir = self.config.work_dir
        if work_dir is not None:
            work_dir.mkdir(parents=True, exist_ok=True)

        with tempfile.TemporaryDirectory(prefix="narration_tmp_", dir=work_dir) as tmp:
            tmp_dir = Path(tmp)
            logger.debug("Staging chunk audio in %s", tmp_dir)
            chunk_files = scheduler.run(chunks, lambda chunk: self._render_chunk(chunk, tmp_dir))
            chunk_bytes = [path.stat().st_size for path in chunk_files]
            total_bytes = concatenate_audio_files(chunk_files, output_path)

        elapsed = time.monotonic() - started
        if self.config.metadata_path is not None:
            builder = MetadataBuilder(
                engine=self.engine,
                config=self.config,
                output_path=Path(self.config.metadata_path),
            )
            builder.write_metadata(
                builder.build_metadata(
                    chunks=chunks,
                    chunk_bytes=chunk_bytes,
                    final_output=output_path,
                    final_bytes=total_bytes,
                    elapsed_sec=elapsed,
                )
            )
            logger.info("Metadata written to %s", builder.output_path)

        return PipelineResult(
            output_path=output_path,
            chunks=chunks,
            chunk_bytes=chunk_bytes,
            total_bytes=total_bytes,
            elapsed_sec=elapsed,
        )

    def _render_chunk(self, chunk: TextChunk, tmp_dir: Path) -> Path:
        audio = self._synthesize_with_retry(chunk)
        path = tmp_dir / f"chunk_{chunk.index}{self.engine.file_extension}"
        try:
            path.write_bytes(audio)
        except OSError as exc:
            raise StagingIOError(
                f"Failed to write {path.name}: {exc}", chunk_index=chunk.index
            ) from exc
        return path

    def _synthesize_with_retry(self, chunk: TextChunk) -> bytes:
        delay = self.config.initial_retry_delay
        attempt = 0
        while True:
            try:
                return self.engine.synthesize(chunk.text, self.config.voice)
            except CollaboratorError as exc:
                attempt += 1
                exc.chunk_index = chunk.index
                if attempt >= self.config.max_retries:
                    logger.error(
                        "Chunk %d failed permanently after %d attempt(s).", chunk.index, attempt
                    )
                    raise
                logger.warning(
                    "Chunk %d synthesis failed (attempt %d/%d). Retrying in %.2fs.",
                    chunk.index,
                    attempt,
                    self.config.max_retries,
                    delay,
                )
                self._sleep(delay)
                delay *= self.config.retry_backoff_factor
