import json
import threading
from pathlib import Path

import pytest

from narration.config import PipelineConfig, VoiceCatalog
from narration.errors import (
    ERROR_KIND_COLLABORATOR,
    ChunkSynthesisError,
    CollaboratorError,
)
from narration.pipeline import NarrationPipeline
from narration.tts_engine import MockTtsEngine, TtsEngine

TEXT = (
    "It was a bright cold day in April. The clocks were striking thirteen. "
    "Winston slipped quickly through the glass doors. A gritty dust swirled in with him!"
)

TEST_CATALOG = VoiceCatalog(voices=("narrator",), languages=("English",))


class EchoEngine(TtsEngine):
    """Returns the chunk text as bytes; optionally fails a number of times per chunk."""

    def __init__(self, failures=None):
        super().__init__(audio_format="mp3")
        self.failures = dict(failures or {})
        self.calls = []
        self._lock = threading.Lock()

    def _synthesize(self, text, voice):
        with self._lock:
            self.calls.append(text)
            remaining = self.failures.get(text, 0)
            if remaining:
                self.failures[text] = remaining - 1
                raise RuntimeError(f"HTTP 500 for {text!r}")
        return f"[{text}]".encode()


def _config(**overrides):
    values = dict(
        max_chunk_chars=40,
        concurrency=3,
        voice="narrator",
        language="English",
        max_retries=2,
        initial_retry_delay=0,
    )
    values.update(overrides)
    return PipelineConfig(**values)


def _leftover_tmp_dirs(work_dir):
    return [p for p in Path(work_dir).iterdir() if p.name.startswith("narration_tmp_")]


def test_pipeline_assembles_chunks_in_order(tmp_path):
    engine = EchoEngine()
    pipeline = NarrationPipeline(engine, _config(work_dir=tmp_path / "work"), catalog=TEST_CATALOG)
    output = tmp_path / "out" / "final.mp3"

    result = pipeline.run(TEXT, output)

    expected = b"".join(f"[{chunk.text}]".encode() for chunk in result.chunks)
    assert result.output_path == output
    assert output.read_bytes() == expected
    assert result.total_bytes == len(expected)
    assert result.chunk_bytes == [len(f"[{c.text}]".encode()) for c in result.chunks]
    assert len(engine.calls) == len(result.chunks)
    assert _leftover_tmp_dirs(tmp_path / "work") == []


def test_pipeline_retries_collaborator_failures(tmp_path):
    pipeline_probe = NarrationPipeline(EchoEngine(), _config(), catalog=TEST_CATALOG)
    first_chunk = pipeline_probe.split(TEXT)[0].text
    sleeps = []
    engine = EchoEngine(failures={first_chunk: 1})
    pipeline = NarrationPipeline(engine, _config(), catalog=TEST_CATALOG, sleep=sleeps.append)

    result = pipeline.run(TEXT, tmp_path / "final.mp3")

    assert result.output_path.exists()
    assert engine.calls.count(first_chunk) == 2
    assert sleeps == [0]


def test_pipeline_failure_removes_temp_files_and_writes_no_output(tmp_path):
    chunks = NarrationPipeline(EchoEngine(), _config(), catalog=TEST_CATALOG).split(TEXT)
    bad = chunks[1].text
    engine = EchoEngine(failures={bad: 99})
    work_dir = tmp_path / "work"
    pipeline = NarrationPipeline(engine, _config(work_dir=work_dir), catalog=TEST_CATALOG, sleep=lambda _: None)
    output = tmp_path / "final.mp3"

    with pytest.raises(ChunkSynthesisError) as excinfo:
        pipeline.run(TEXT, output)

    assert excinfo.value.chunk_index == 1
    assert excinfo.value.error_kind == ERROR_KIND_COLLABORATOR
    assert isinstance(excinfo.value.__cause__, CollaboratorError)
    assert not output.exists()
    assert _leftover_tmp_dirs(work_dir) == []
    # Every other chunk was still attempted.
    assert {c.text for c in chunks} <= set(engine.calls)


def test_pipeline_empty_text_makes_no_calls(tmp_path):
    engine = EchoEngine()
    pipeline = NarrationPipeline(engine, _config(), catalog=TEST_CATALOG)

    result = pipeline.run("   ", tmp_path / "final.mp3")

    assert result.output_path is None
    assert result.chunks == []
    assert engine.calls == []
    assert not (tmp_path / "final.mp3").exists()


def test_pipeline_writes_metadata(tmp_path):
    metadata_path = tmp_path / "meta" / "run.json"
    engine = MockTtsEngine()
    pipeline = NarrationPipeline(
        engine,
        _config(metadata_path=metadata_path),
        catalog=VoiceCatalog(voices=(), languages=("English",)),
    )

    result = pipeline.run(TEXT, tmp_path / "final.pcm")

    metadata = json.loads(metadata_path.read_text(encoding="utf-8"))
    assert metadata["engine"] == "MockTtsEngine"
    assert metadata["final_bytes"] == result.total_bytes
    assert [c["index"] for c in metadata["chunks"]] == list(range(len(result.chunks)))
    assert metadata["chunks"][0]["file"] == "chunk_0.pcm"
    assert sum(c["bytes"] for c in metadata["chunks"]) == result.total_bytes


def test_pipeline_validates_voice_against_catalog():
    with pytest.raises(ValueError, match="Unknown voice"):
        NarrationPipeline(EchoEngine(), _config(voice="robot"), catalog=TEST_CATALOG)


def test_pipeline_validates_config():
    with pytest.raises(ValueError):
        NarrationPipeline(EchoEngine(), _config(concurrency=0), catalog=TEST_CATALOG)
