from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

import openai
from pydub import AudioSegment

from .errors import CollaboratorError, EmptyInputError

logger = logging.getLogger(__name__)

__all__ = [
    "TtsEngine",
    "OpenAITtsEngine",
    "PollyTtsEngine",
    "MockTtsEngine",
]


class TtsEngine(ABC):
    """
    Thin abstraction over a text-to-speech backend that returns encoded audio bytes.

    The bytes of consecutive calls must be concatenable as-is, so engines pick
    stream-friendly formats (mp3, raw PCM).
    """

    def __init__(self, *, audio_format: str = "mp3") -> None:
        self.audio_format = audio_format

    @property
    def file_extension(self) -> str:
        return f".{self.audio_format}"

    def descriptor(self) -> str:
        return self.__class__.__name__

    def synthesize(self, text: str, voice: str) -> bytes:
        """
        Convert one chunk of text into audio bytes with the given voice.

        Blank text is rejected before the backend is contacted. Backend errors
        and empty responses are raised as :class:`CollaboratorError`.
        """
        if not text or not text.strip():
            raise EmptyInputError("Empty text chunk.")

        try:
            audio = self._synthesize(text, voice)
        except (CollaboratorError, EmptyInputError):
            raise
        except Exception as exc:
            raise CollaboratorError(f"{self.descriptor()} request failed: {exc}") from exc

        if not audio:
            raise CollaboratorError(f"{self.descriptor()} returned empty audio.")
        return audio

    @abstractmethod
    def _synthesize(self, text: str, voice: str) -> bytes:
        """
        Backend specific request. Returns the raw response body.
        """


class OpenAITtsEngine(TtsEngine):
    """
    OpenAI ``/v1/audio/speech`` implementation using the official ``openai`` client.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        model: str = "tts-1-hd",
        response_format: str = "mp3",
        base_url: Optional[str] = None,
        timeout: float = 120.0,
        client: Optional[object] = None,
    ) -> None:
        super().__init__(audio_format=response_format)
        if client is None:
            client = openai.OpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
        self._client = client
        self._model = model

    def descriptor(self) -> str:
        return f"OpenAITtsEngine({self._model})"

    def verify_credentials(self) -> None:
        """
        Make a cheap authenticated call so a bad API key fails before any chunk work.
        """
        try:
            self._client.models.list()  # type: ignore[attr-defined]
        except Exception as exc:
            raise CollaboratorError(f"OpenAI API key check failed: {exc}") from exc
        logger.info("OpenAI API key valid.")

    def _synthesize(self, text: str, voice: str) -> bytes:
        logger.debug("OpenAI speech request: model=%s voice=%s chars=%d", self._model, voice, len(text))
        response = self._client.audio.speech.create(  # type: ignore[attr-defined]
            model=self._model,
            voice=voice,
            input=text,
            response_format=self.audio_format,
        )
        return response.content


class PollyTtsEngine(TtsEngine):
    """
    Amazon Polly implementation producing MP3 streams.
    """

    def __init__(
        self,
        *,
        engine: str = "neural",
        language_code: Optional[str] = None,
        output_format: str = "mp3",
        boto3_client: Optional[object] = None,
    ) -> None:
        super().__init__(audio_format=output_format)
        if boto3_client is None:
            try:
                import boto3  # type: ignore
            except ImportError as exc:  # pragma: no cover - optional dependency
                raise RuntimeError(
                    "boto3 is required for PollyTtsEngine but is not installed."
                ) from exc
            boto3_client = boto3.client("polly")

        self._client = boto3_client
        self._engine = engine
        self._language_code = language_code

    def _synthesize(self, text: str, voice: str) -> bytes:
        params = {
            "Engine": self._engine,
            "VoiceId": voice,
            "OutputFormat": self.audio_format,
            "Text": text,
            "TextType": "text",
        }
        if self._language_code:
            params["LanguageCode"] = self._language_code

        logger.debug("Polly request params: %s", {k: v for k, v in params.items() if k != "Text"})
        response = self._client.synthesize_speech(**params)  # type: ignore[attr-defined]
        stream = response.get("AudioStream")
        if stream is None:
            raise CollaboratorError("Polly response did not include AudioStream.")

        return stream.read() if hasattr(stream, "read") else stream


class MockTtsEngine(TtsEngine):
    """
    Offline engine for dry runs and tests. Produces silent raw PCM of predictable length.
    """

    def __init__(
        self,
        durations_ms: Optional[Dict[str, int]] = None,
        *,
        base_duration_ms: int = 200,
        per_char_ms: int = 10,
        sample_rate: int = 8000,
    ) -> None:
        super().__init__(audio_format="pcm")
        self._durations_ms = durations_ms or {}
        self._base_duration_ms = base_duration_ms
        self._per_char_ms = per_char_ms
        self.sample_rate = sample_rate

    def duration_for(self, text: str) -> int:
        return self._durations_ms.get(text, self._base_duration_ms + len(text) * self._per_char_ms)

    def _synthesize(self, text: str, voice: str) -> bytes:
        segment = AudioSegment.silent(duration=self.duration_for(text), frame_rate=self.sample_rate)
        return segment.raw_data
