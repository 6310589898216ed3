from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .scheduler import SynthesisResult

__all__ = [
    "ERROR_KIND_EMPTY_INPUT",
    "ERROR_KIND_COLLABORATOR",
    "ERROR_KIND_IO",
    "ERROR_KIND_UNKNOWN",
    "PipelineError",
    "EmptyInputError",
    "CollaboratorError",
    "StagingIOError",
    "AssemblyError",
    "ChunkSynthesisError",
    "classify_exception",
]

ERROR_KIND_EMPTY_INPUT = "empty_input"
ERROR_KIND_COLLABORATOR = "collaborator_failure"
ERROR_KIND_IO = "io_failure"
ERROR_KIND_UNKNOWN = "unknown"


class PipelineError(RuntimeError):
    error_kind = ERROR_KIND_UNKNOWN

    def __init__(self, message: str, *, chunk_index: Optional[int] = None) -> None:
        super().__init__(message)
        self.chunk_index = chunk_index


class EmptyInputError(PipelineError):
    """Chunk text has no non-whitespace content."""

    error_kind = ERROR_KIND_EMPTY_INPUT


class CollaboratorError(PipelineError):
    """The synthesis backend failed or returned no audio."""

    error_kind = ERROR_KIND_COLLABORATOR


class StagingIOError(PipelineError):
    error_kind = ERROR_KIND_IO


class AssemblyError(PipelineError):
    error_kind = ERROR_KIND_IO


class ChunkSynthesisError(PipelineError):
    """
    Raised by the scheduler once all tasks have drained and at least one failed.

    ``chunk_index``, ``error_kind`` and ``__cause__`` describe the first failure
    by completion order; ``failures`` holds every failed result.
    """

    def __init__(self, failures: Sequence["SynthesisResult"]) -> None:
        if not failures:
            raise ValueError("ChunkSynthesisError requires at least one failure.")
        self.failures: List["SynthesisResult"] = list(failures)
        primary = self.failures[0]
        self.error_kind = primary.error_kind
        super().__init__(
            f"chunk {primary.index} failed ({primary.error_kind}): {primary.error}"
            + (f" [{len(self.failures)} chunk(s) failed]" if len(self.failures) > 1 else ""),
            chunk_index=primary.index,
        )
        self.__cause__ = primary.error

    @property
    def failed_indexes(self) -> List[int]:
        return sorted(result.index for result in self.failures)


def _iter_exception_chain(exc: BaseException) -> Iterable[BaseException]:
    seen: set[int] = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        yield current
        seen.add(id(current))
        current = current.__cause__ or current.__context__


def classify_exception(exc: BaseException) -> str:
    for item in _iter_exception_chain(exc):
        if isinstance(item, PipelineError):
            return item.error_kind
        if isinstance(item, OSError):
            return ERROR_KIND_IO
    return ERROR_KIND_UNKNOWN
