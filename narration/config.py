from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

__all__ = [
    "OPENAI_VOICES",
    "LANGUAGES",
    "VoiceCatalog",
    "DEFAULT_CATALOG",
    "PipelineConfig",
]

OPENAI_VOICES: Tuple[str, ...] = (
    "alloy", "ash", "coral", "echo", "fable", "onyx", "nova", "sage", "shimmer",
)

LANGUAGES: Tuple[str, ...] = (
    "Afrikaans", "Arabic", "Armenian", "Azerbaijani", "Belarusian", "Bosnian",
    "Bulgarian", "Catalan", "Chinese", "Croatian", "Czech", "Danish", "Dutch",
    "English", "Estonian", "Finnish", "French", "Galician", "German", "Greek",
    "Hebrew", "Hindi", "Hungarian", "Icelandic", "Indonesian", "Italian",
    "Japanese", "Kannada", "Kazakh", "Korean", "Latvian", "Lithuanian",
    "Macedonian", "Malay", "Marathi", "Maori", "Nepali", "Norwegian", "Persian",
    "Polish", "Portuguese", "Romanian", "Russian", "Serbian", "Slovak",
    "Slovenian", "Spanish", "Swahili", "Swedish", "Tagalog", "Tamil", "Thai",
    "Turkish", "Ukrainian", "Urdu", "Vietnamese", "Welsh",
)


@dataclass(frozen=True)
class VoiceCatalog:
    """
    Voices and languages a run may choose from.

    An empty ``voices`` tuple accepts any voice name, for engines whose voice
    list is not known up front.
    """

    voices: Tuple[str, ...] = OPENAI_VOICES
    languages: Tuple[str, ...] = LANGUAGES

    def validate(self, voice: str, language: str) -> None:
        if self.voices and voice not in self.voices:
            raise ValueError(f"Unknown voice {voice!r}; choose one of: {', '.join(self.voices)}")
        if self.languages and language not in self.languages:
            raise ValueError(f"Unknown language {language!r}.")


DEFAULT_CATALOG = VoiceCatalog()


@dataclass(frozen=True)
class PipelineConfig:
    """
    Settings for a single narration run.
    """

    max_chunk_chars: int = 2800
    concurrency: int = 5
    voice: str = "alloy"
    language: str = "English"
    max_retries: int = 3
    initial_retry_delay: float = 0.5
    retry_backoff_factor: float = 2.0
    work_dir: Optional[Path] = None
    metadata_path: Optional[Path] = None

    def validate(self) -> None:
        if self.max_chunk_chars <= 0:
            raise ValueError("max_chunk_chars must be positive.")
        if self.concurrency < 1:
            raise ValueError("concurrency must be at least 1.")
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1.")
        if self.initial_retry_delay < 0 or self.retry_backoff_factor < 1:
            raise ValueError("retry delay must be >= 0 and backoff factor >= 1.")
