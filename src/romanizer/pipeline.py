"""
Sequential chunked conversion of subtitle documents.

A document is split into blocks, the blocks are packed into chunks, and each
chunk is sent to the transliteration service strictly in order with a single
call outstanding at a time. Outputs are accumulated as they arrive so progress
and partial output are available after every chunk.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

from .chunking import DEFAULT_MAX_CHUNK_SIZE, assemble_chunks
from .errors import ConfigurationError, ServiceInvocationFailure
from .models import Chunk, ConversionResult, ConversionState, ConversionStatus
from .progress import ProgressCallback, progress_fraction
from .srt_utils import split_blocks

logger = logging.getLogger("romanizer")


class TransliterationService(Protocol):
    def transliterate(self, text: str) -> str: ...


class AsyncTransliterationService(Protocol):
    async def transliterate(self, text: str) -> str: ...


class ConversionPipeline:
    """Orchestrates conversion runs over an injected service.

    Every run owns its own ``ConversionState``. Starting a run supersedes any
    run still in progress on the same pipeline: the older run stops before its
    next chunk and no longer reports progress. ``state`` points at the latest
    run's state for observation only.
    """

    def __init__(
        self,
        max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        if max_chunk_size < 1:
            raise ValueError(f"max_chunk_size must be >= 1, got {max_chunk_size}")
        self.max_chunk_size = max_chunk_size
        self.on_progress = on_progress
        self.state: ConversionState | None = None
        self._generation = 0
        self._cancelled_generation = -1

    def cancel(self) -> None:
        """Stop the current run before its next chunk. An in-flight call is left to finish."""
        self._cancelled_generation = self._generation

    def run(self, document: str, service: TransliterationService) -> ConversionResult:
        """Convert ``document`` chunk by chunk with a synchronous service."""
        if is_async_service(service):
            raise ConfigurationError(
                f"{type(service).__name__} is asynchronous; use run_async() / convert_async()"
            )
        state, chunks, generation = self._start(document)
        for chunk in chunks:
            if not self._begin(state, chunk, generation):
                break
            try:
                text = service.transliterate(chunk.text)
            except Exception as e:  # noqa: BLE001 - any service error fails this chunk
                self._fail(state, chunk, e)
                break
            self._complete(state, chunk, text, generation)
        return self._finish(state)

    async def run_async(self, document: str, service: AsyncTransliterationService) -> ConversionResult:
        """Convert ``document`` chunk by chunk, awaiting each call before issuing the next."""
        if not is_async_service(service):
            raise ConfigurationError(
                f"{type(service).__name__} is synchronous; use run() / convert()"
            )
        state, chunks, generation = self._start(document)
        for chunk in chunks:
            if not self._begin(state, chunk, generation):
                break
            try:
                text = await service.transliterate(chunk.text)
            except Exception as e:  # noqa: BLE001 - any service error fails this chunk
                self._fail(state, chunk, e)
                break
            self._complete(state, chunk, text, generation)
        return self._finish(state)

    def _start(self, document: str) -> tuple[ConversionState, list[Chunk], int]:
        self._generation += 1
        blocks = split_blocks(document)
        chunks = assemble_chunks(blocks, self.max_chunk_size)
        state = ConversionState(total=len(chunks))
        self.state = state
        if not chunks:
            logger.info("Document has no subtitle blocks; nothing to convert")
        else:
            logger.info(
                f"Converting {len(blocks)} blocks in {len(chunks)} chunk(s) "
                f"of up to {self.max_chunk_size} blocks"
            )
        return state, chunks, self._generation

    def _begin(self, state: ConversionState, chunk: Chunk, generation: int) -> bool:
        if generation != self._generation:
            state.status = ConversionStatus.CANCELLED
            logger.warning(
                f"Conversion superseded by a newer run before chunk {chunk.index + 1}/{state.total}"
            )
            return False
        if generation == self._cancelled_generation:
            state.status = ConversionStatus.CANCELLED
            logger.warning(f"Conversion cancelled before chunk {chunk.index + 1}/{state.total}")
            return False
        logger.info(f"Transliterating chunk {chunk.index + 1}/{state.total} ({len(chunk)} blocks)...")
        return True

    def _complete(self, state: ConversionState, chunk: Chunk, text: str, generation: int) -> None:
        state.append_output(text)
        logger.debug(f"Chunk {chunk.index + 1}/{state.total} done: {len(chunk.text)} -> {len(text)} characters")
        if generation == self._generation:
            self._report(progress_fraction(state.completed, state.total))

    def _fail(self, state: ConversionState, chunk: Chunk, exc: Exception) -> None:
        if isinstance(exc, ServiceInvocationFailure):
            error = exc
        else:
            error = ServiceInvocationFailure(f"Chunk {chunk.index + 1}/{state.total} failed: {exc}")
            error.__cause__ = exc
        state.status = ConversionStatus.FAILED
        state.error = error
        logger.error(
            f"Chunk {chunk.index + 1}/{state.total} failed: {exc}. "
            f"Keeping output of {state.completed} completed chunk(s)"
        )

    def _finish(self, state: ConversionState) -> ConversionResult:
        if state.status is ConversionStatus.RUNNING:
            state.status = ConversionStatus.SUCCEEDED
            if state.total == 0:
                self._report(1.0)
            logger.info(f"Conversion completed: {state.completed} chunk(s), {len(state.output)} characters")
        return ConversionResult.from_state(state)

    def _report(self, fraction: float) -> None:
        if self.on_progress is not None:
            self.on_progress(fraction)


def is_async_service(service: object) -> bool:
    """True when the service's ``transliterate`` is a coroutine function."""
    return inspect.iscoroutinefunction(getattr(service, "transliterate", None))


def convert_document(
    document: str,
    service: TransliterationService,
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
    on_progress: ProgressCallback | None = None,
) -> ConversionResult:
    """One-shot synchronous conversion of a whole document."""
    return ConversionPipeline(max_chunk_size, on_progress).run(document, service)


async def convert_document_async(
    document: str,
    service: AsyncTransliterationService,
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
    on_progress: ProgressCallback | None = None,
) -> ConversionResult:
    """One-shot asynchronous conversion of a whole document."""
    return await ConversionPipeline(max_chunk_size, on_progress).run_async(document, service)


class FunctionService:
    """Adapts a plain ``str -> str`` function to the service interface."""

    def __init__(self, func: Callable[[str], str]) -> None:
        self._func = func

    def transliterate(self, text: str) -> str:
        return self._func(text)


class AsyncFunctionService:
    """Adapts an ``async str -> str`` function to the async service interface."""

    def __init__(self, func: Callable[[str], Awaitable[str]]) -> None:
        self._func = func

    async def transliterate(self, text: str) -> str:
        return await self._func(text)
