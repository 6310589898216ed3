#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

from narration.config import DEFAULT_CATALOG, LANGUAGES, PipelineConfig, VoiceCatalog
from narration.errors import PipelineError
from narration.pipeline import NarrationPipeline
from narration.progress import NullProgress, RichProgress
from narration.tts_engine import MockTtsEngine, OpenAITtsEngine, PollyTtsEngine, TtsEngine

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Narrate a long text file into a single audio file.")
    parser.add_argument("input", help="Input text file path.")
    parser.add_argument("--input-encoding", default="utf-8", help="Encoding used for input file.")
    parser.add_argument("--output", default="./output/narration.mp3", help="Path for the final audio file.")
    parser.add_argument("--metadata-output", help="Optional path for run metadata JSON.")
    parser.add_argument("--work-dir", help="Parent directory for the run's temporary chunk files.")
    parser.add_argument("--engine", default="openai", help="TTS engine to use (openai, polly, mock).")
    parser.add_argument("--api-key", help="OpenAI API key (defaults to OPENAI_API_KEY env var).")
    parser.add_argument("--model", default="tts-1-hd", help="OpenAI speech model name.")
    parser.add_argument("--format", default="mp3", help="Audio format requested from the engine.")
    parser.add_argument("--voice", default="alloy", help="Voice name (engine specific).")
    parser.add_argument("--language", default="English", help="Language of the input text.")
    parser.add_argument("--language-code", help="Language code hint for Polly.")
    parser.add_argument("--max-chunk-chars", type=int, default=2800, help="Maximum characters per chunk.")
    parser.add_argument("--concurrency", type=int, default=5, help="Maximum simultaneous synthesis requests.")
    parser.add_argument("--max-retries", type=int, default=3, help="Maximum synthesis attempts per chunk.")
    parser.add_argument("--retry-initial-delay", type=float, default=0.5, help="Initial retry delay in seconds.")
    parser.add_argument("--retry-backoff", type=float, default=2.0, help="Multiplier for retry backoff.")
    parser.add_argument("--skip-key-check", action="store_true", help="Do not validate the API key before starting.")
    parser.add_argument("--no-progress", action="store_true", help="Disable the progress bar.")
    parser.add_argument("--debug", action="store_true", help="Enable verbose logging.")
    return parser.parse_args(argv)


def configure_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )


def load_input_text(path: Path, encoding: str) -> str:
    if not path.exists():
        raise FileNotFoundError(f"Input file does not exist: {path}")
    return path.read_text(encoding=encoding)


def create_engine(args: argparse.Namespace) -> TtsEngine:
    engine_name = (args.engine or "").lower()
    if engine_name in {"mock", "dummy"}:
        return MockTtsEngine()

    if engine_name in {"polly", "aws_polly"}:
        return PollyTtsEngine(language_code=args.language_code, output_format=args.format)

    if engine_name == "openai":
        api_key = args.api_key or os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OpenAI engine requires an API key (use --api-key or OPENAI_API_KEY env var).")
        engine = OpenAITtsEngine(api_key=api_key, model=args.model, response_format=args.format)
        if not args.skip_key_check:
            engine.verify_credentials()
        return engine

    raise ValueError(f"Unsupported engine: {args.engine}")


def catalog_for(engine: TtsEngine) -> VoiceCatalog:
    if isinstance(engine, OpenAITtsEngine):
        return DEFAULT_CATALOG
    return VoiceCatalog(voices=(), languages=LANGUAGES)


def build_config(args: argparse.Namespace) -> PipelineConfig:
    return PipelineConfig(
        max_chunk_chars=args.max_chunk_chars,
        concurrency=args.concurrency,
        voice=args.voice,
        language=args.language,
        max_retries=args.max_retries,
        initial_retry_delay=args.retry_initial_delay,
        retry_backoff_factor=args.retry_backoff,
        work_dir=Path(args.work_dir) if args.work_dir else None,
        metadata_path=Path(args.metadata_output) if args.metadata_output else None,
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.debug)

    input_path = Path(args.input)
    text = load_input_text(input_path, args.input_encoding)
    logger.info("Loaded %d characters from %s", len(text), input_path)

    engine = create_engine(args)
    config = build_config(args)
    pipeline = NarrationPipeline(
        engine,
        config,
        catalog=catalog_for(engine),
        progress_factory=NullProgress if args.no_progress else RichProgress,
    )
    logger.info(
        "Voice=%s language=%s engine=%s max_chunk_chars=%d concurrency=%d",
        config.voice,
        config.language,
        engine.descriptor(),
        config.max_chunk_chars,
        config.concurrency,
    )

    try:
        result = pipeline.run(text, Path(args.output))
    except PipelineError as exc:
        # ChunkSynthesisError messages already name the chunk index.
        logger.error("Aborted (%s): %s", exc.error_kind, exc)
        return 1

    if result.output_path is None:
        logger.warning("Input contained no text. Nothing to synthesize.")
        return 0

    logger.info(
        "Narration complete. %d chunk(s), %d bytes saved to %s",
        len(result.chunks),
        result.total_bytes,
        result.output_path,
    )
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.error("Interrupted by user.")
        sys.exit(1)
    except Exception as exc:
        logger.exception("Fatal error: %s", exc)
        sys.exit(1)
