import pytest

from narration.errors import ERROR_KIND_IO, AssemblyError
from narration.merger import concatenate_audio_files


def test_concatenate_audio_files_joins_bytes_in_order(tmp_path):
    chunk_dir = tmp_path / "chunks"
    chunk_dir.mkdir()

    payloads = [b"ID3-first", b"\x00\x01\x02", b"last-part"]
    paths = []
    for index, payload in enumerate(payloads):
        path = chunk_dir / f"chunk_{index}.mp3"
        path.write_bytes(payload)
        paths.append(path)

    output_path = tmp_path / "out" / "final.mp3"

    written = concatenate_audio_files(paths, output_path)

    assert output_path.read_bytes() == b"".join(payloads)
    assert written == sum(len(p) for p in payloads)
    assert not (tmp_path / "out" / "final.mp3.part").exists()


def test_concatenate_audio_files_missing_source_leaves_no_output(tmp_path):
    good = tmp_path / "chunk_0.mp3"
    good.write_bytes(b"data")
    output_path = tmp_path / "final.mp3"

    with pytest.raises(AssemblyError) as excinfo:
        concatenate_audio_files([good, tmp_path / "chunk_1.mp3"], output_path)

    assert excinfo.value.error_kind == ERROR_KIND_IO
    assert not output_path.exists()
    assert not (tmp_path / "final.mp3.part").exists()


def test_concatenate_audio_files_requires_input(tmp_path):
    with pytest.raises(ValueError):
        concatenate_audio_files([], tmp_path / "final.mp3")
