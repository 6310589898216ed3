from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Sequence

from .chunker import TextChunk
from .config import PipelineConfig
from .tts_engine import TtsEngine

__all__ = ["MetadataBuilder"]


@dataclass
class MetadataBuilder:
    engine: TtsEngine
    config: PipelineConfig
    output_path: Path

    def build_metadata(
        self,
        *,
        chunks: Sequence[TextChunk],
        chunk_bytes: Sequence[int],
        final_output: Path,
        final_bytes: int,
        elapsed_sec: float,
    ) -> Dict[str, object]:
        return {
            "created_at": datetime.now(timezone.utc).isoformat(),
            "engine": self.engine.descriptor(),
            "format": self.engine.audio_format,
            "voice": self.config.voice,
            "language": self.config.language,
            "max_chunk_chars": self.config.max_chunk_chars,
            "concurrency": self.config.concurrency,
            "chunks": [
                {
                    "index": chunk.index,
                    "file": f"chunk_{chunk.index}{self.engine.file_extension}",
                    "chars": len(chunk.text),
                    "sentences": chunk.sentence_count,
                    "bytes": size,
                }
                for chunk, size in zip(chunks, chunk_bytes)
            ],
            "final_output": str(final_output),
            "final_bytes": final_bytes,
            "elapsed_sec": round(elapsed_sec, 3),
        }

    def write_metadata(self, metadata: Dict[str, object]) -> None:
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        with self.output_path.open("w", encoding="utf-8") as f:
            json.dump(metadata, f, ensure_ascii=False, indent=2)
