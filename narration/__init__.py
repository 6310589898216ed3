"""
Long-form text narration pipeline.

This package exposes the building blocks used by the ``narrate`` CLI:

- Sentence splitting and word packing (`split_text`).
- Chunk construction under a character limit (`chunker`).
- Bounded-concurrency synthesis scheduling (`scheduler`, `progress`).
- Engine abstractions and concrete implementations (`tts_engine`).
- Byte-level audio assembly (`merger`).
- Run configuration, metadata and error types (`config`, `metadata`, `errors`).
- The end-to-end pipeline (`pipeline`).
"""

from .split_text import pack_words, split_into_sentences
from .chunker import ChunkBuilder, TextChunk, chunk_text
from .config import DEFAULT_CATALOG, PipelineConfig, VoiceCatalog
from .errors import (
    AssemblyError,
    ChunkSynthesisError,
    CollaboratorError,
    EmptyInputError,
    PipelineError,
    StagingIOError,
)
from .merger import concatenate_audio_files
from .metadata import MetadataBuilder
from .pipeline import NarrationPipeline, PipelineResult
from .progress import NullProgress, ProgressObserver, RichProgress
from .scheduler import AdmissionGate, SynthesisResult, SynthesisScheduler
from .tts_engine import MockTtsEngine, OpenAITtsEngine, PollyTtsEngine, TtsEngine

__all__ = [
    "split_into_sentences",
    "pack_words",
    "TextChunk",
    "ChunkBuilder",
    "chunk_text",
    "VoiceCatalog",
    "DEFAULT_CATALOG",
    "PipelineConfig",
    "PipelineError",
    "EmptyInputError",
    "CollaboratorError",
    "StagingIOError",
    "AssemblyError",
    "ChunkSynthesisError",
    "concatenate_audio_files",
    "MetadataBuilder",
    "NarrationPipeline",
    "PipelineResult",
    "ProgressObserver",
    "NullProgress",
    "RichProgress",
    "AdmissionGate",
    "SynthesisResult",
    "SynthesisScheduler",
    "TtsEngine",
    "OpenAITtsEngine",
    "PollyTtsEngine",
    "MockTtsEngine",
]
