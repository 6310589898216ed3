from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Sequence

from .errors import AssemblyError

logger = logging.getLogger(__name__)

__all__ = ["concatenate_audio_files"]

_COPY_BUFFER_BYTES = 1024 * 1024


def concatenate_audio_files(paths: Sequence[Path], output_path: Path) -> int:
    """
    Join chunk audio files byte for byte, in the given order, into ``output_path``.

    The files are treated as opaque streams: nothing is decoded, re-encoded or
    trimmed. Output is staged next to the destination and moved into place only
    once every chunk has been copied. Returns the number of bytes written.
    """
    if not paths:
        raise ValueError("No chunk files provided for merging.")

    output_path = Path(output_path)
    partial_path = output_path.with_name(output_path.name + ".part")
    written = 0
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with partial_path.open("wb") as out:
            for path in paths:
                with Path(path).open("rb") as src:
                    shutil.copyfileobj(src, out, _COPY_BUFFER_BYTES)
                written = out.tell()
        os.replace(partial_path, output_path)
    except OSError as exc:
        partial_path.unlink(missing_ok=True)
        raise AssemblyError(f"Failed to assemble {output_path}: {exc}") from exc

    logger.info("Merged %d chunk file(s) into %s (%d bytes)", len(paths), output_path, written)
    return written
