"""
Data models for the subtitle conversion pipeline.
"""

from dataclasses import dataclass, field
from enum import Enum

from .errors import ConversionCancelled, PartialConversionFailure, ServiceInvocationFailure

BLOCK_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class Block:
    """One subtitle entry (index, timing and content lines) kept as opaque text."""

    text: str


@dataclass(frozen=True)
class Chunk:
    """A bounded group of consecutive blocks sent to the service in one call."""

    index: int  # 0-based position in the chunk sequence
    blocks: tuple[Block, ...]

    @property
    def text(self) -> str:
        return BLOCK_SEPARATOR.join(b.text for b in self.blocks)

    def __len__(self) -> int:
        return len(self.blocks)


class ConversionStatus(str, Enum):
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class ConversionState:
    """Mutable state of a single conversion run."""

    total: int
    completed: int = 0
    output: str = ""
    status: ConversionStatus = ConversionStatus.RUNNING
    error: ServiceInvocationFailure | None = None

    def append_output(self, text: str) -> None:
        """Append one chunk's output, separated from earlier non-empty output by a blank line."""
        if self.output and text:
            self.output += BLOCK_SEPARATOR
        self.output += text
        self.completed += 1


@dataclass
class ConversionResult:
    """Final outcome of a run; failed and cancelled runs keep their partial output."""

    output: str
    status: ConversionStatus
    completed: int = 0
    total: int = 0
    error: ServiceInvocationFailure | None = field(default=None, repr=False)

    @property
    def succeeded(self) -> bool:
        return self.status is ConversionStatus.SUCCEEDED

    @property
    def is_empty(self) -> bool:
        """True for the trivial run over a document without blocks."""
        return self.succeeded and self.total == 0

    @property
    def is_partial(self) -> bool:
        return not self.succeeded and self.completed > 0

    @classmethod
    def from_state(cls, state: ConversionState) -> "ConversionResult":
        return cls(
            output=state.output,
            status=state.status,
            completed=state.completed,
            total=state.total,
            error=state.error,
        )

    def raise_for_status(self) -> None:
        """Raise the matching error for a run that did not succeed."""
        if self.status is ConversionStatus.CANCELLED:
            raise ConversionCancelled(
                f"Conversion cancelled after {self.completed}/{self.total} chunks"
            )
        if self.status is not ConversionStatus.FAILED:
            return
        if self.completed > 0:
            raise PartialConversionFailure(
                f"Chunk {self.completed + 1}/{self.total} failed: {self.error}",
                partial_output=self.output,
                completed=self.completed,
                total=self.total,
            ) from self.error
        if self.error is not None:
            raise self.error
        raise ServiceInvocationFailure("Conversion failed")
