"""
Progress reporting for conversion runs.
"""

from collections.abc import Callable

from tqdm import tqdm

ProgressCallback = Callable[[float], None]


def progress_fraction(completed: int, total: int) -> float:
    """Completed chunks over total chunks, clamped to [0, 1]. Zero chunks counts as done."""
    if total <= 0:
        return 1.0
    if completed >= total:
        return 1.0
    return max(0.0, completed / total)


def format_percent(fraction: float) -> str:
    return f"{round(fraction * 100)}%"


class TqdmProgress:
    """Progress callback that drives a tqdm bar measured in percent."""

    def __init__(self, desc: str = "Converting", **tqdm_kwargs) -> None:
        self._bar = tqdm(total=100, desc=desc, unit="%", **tqdm_kwargs)
        self._last = 0

    def __call__(self, fraction: float) -> None:
        pct = round(fraction * 100)
        if pct > self._last:
            self._bar.update(pct - self._last)
            self._last = pct

    def close(self) -> None:
        self._bar.close()

    def __enter__(self) -> "TqdmProgress":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
