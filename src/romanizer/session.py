"""
Load, convert and save flow for one subtitle file at a time.
"""

import logging
from pathlib import Path

from .chunking import DEFAULT_MAX_CHUNK_SIZE
from .errors import InvalidDocumentError, NoDocumentError
from .models import ConversionResult
from .pipeline import AsyncTransliterationService, ConversionPipeline, TransliterationService
from .progress import ProgressCallback
from .srt_utils import (
    DEFAULT_OUTPUT_SUFFIX,
    derive_output_name,
    is_subtitle_file,
    read_document,
    write_document,
)

logger = logging.getLogger("romanizer")


class ConversionSession:
    """
    Holds the loaded source document and the latest conversion result.

    Loading a new document or starting a new conversion discards the previous
    result, so output always belongs to the current source. Use convert() with a
    synchronous service and convert_async() with an async one.
    """

    def __init__(
        self,
        service: TransliterationService | AsyncTransliterationService,
        max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
        output_suffix: str = DEFAULT_OUTPUT_SUFFIX,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.service = service
        self.output_suffix = output_suffix
        self.pipeline = ConversionPipeline(max_chunk_size, on_progress)
        self.source_path: Path | None = None
        self.source_name: str | None = None
        self.document: str | None = None
        self.result: ConversionResult | None = None
        self._latest_run: object | None = None

    def reset(self) -> None:
        self.source_path = None
        self.source_name = None
        self.document = None
        self.result = None

    def load(self, path: str | Path) -> str:
        """Read an ``.srt`` file as the new source document."""
        p = Path(path)
        if not is_subtitle_file(p):
            self.reset()
            raise InvalidDocumentError(f"Not an SRT subtitle file: {p.name}")
        text = read_document(p)
        self.load_text(text, name=p.name)
        self.source_path = p
        logger.info(f"Loaded {p} ({len(text)} characters)")
        return text

    def load_text(self, text: str, name: str = "converted.srt") -> None:
        if not is_subtitle_file(name):
            self.reset()
            raise InvalidDocumentError(f"Not an SRT subtitle file: {name}")
        self.reset()
        self.source_name = name
        self.document = text

    def convert(self) -> ConversionResult:
        self._require_document()
        self.result = None
        self._latest_run = None
        self.result = self.pipeline.run(self.document, self.service)
        return self.result

    async def convert_async(self) -> ConversionResult:
        self._require_document()
        self.result = None
        run = self._latest_run = object()
        result = await self.pipeline.run_async(self.document, self.service)
        # a superseded run must not replace the newer run's result
        if self._latest_run is run:
            self.result = result
        return result

    def cancel(self) -> None:
        self.pipeline.cancel()

    @property
    def output_name(self) -> str:
        return derive_output_name(self.source_name, self.output_suffix)

    def save(self, directory: str | Path | None = None, *, allow_partial: bool = False) -> Path:
        """Write the converted document and return its path."""
        result = self.result
        if result is None or not result.output:
            raise NoDocumentError("No converted output to save. Run a conversion first.")
        if not result.succeeded and not allow_partial:
            raise NoDocumentError(
                f"Conversion {result.status.value}; pass allow_partial=True to save partial output"
            )

        if directory is not None:
            out_dir = Path(directory)
        elif self.source_path is not None:
            out_dir = self.source_path.parent
        else:
            out_dir = Path.cwd()
        out_dir.mkdir(parents=True, exist_ok=True)

        out_path = out_dir / self.output_name
        write_document(result.output, out_path)
        logger.info(f"Saved {'partial ' if not result.succeeded else ''}output -> {out_path}")
        return out_path

    def _require_document(self) -> None:
        if self.document is None:
            raise NoDocumentError("No subtitle file loaded. Load a file first.")
