"""
Per-word retain-or-transliterate strategies consulted by the transliteration service.
"""

import logging
from collections.abc import Callable, Iterable
from typing import Literal, Protocol

from tqdm import tqdm

logger = logging.getLogger("romanizer")

Decision = Literal["transliterate", "keep"]
TRANSLITERATE: Decision = "transliterate"
KEEP: Decision = "keep"
DECISIONS: tuple[Decision, ...] = (TRANSLITERATE, KEEP)


def ask_console(prompt: str) -> str:
    """Read a reply from the terminal without breaking a live tqdm bar."""
    tqdm.write(prompt, end="")
    return input()


class WordDecisionStrategy(Protocol):
    def decide(self, word: str) -> Decision: ...


class AlwaysTransliterate:
    """Transliterate every word."""

    def decide(self, word: str) -> Decision:
        return TRANSLITERATE


class KeepShortWords:
    """Keep words shorter than ``min_length`` characters in their original script."""

    def __init__(self, min_length: int = 2) -> None:
        if min_length < 1:
            raise ValueError(f"min_length must be >= 1, got {min_length}")
        self.min_length = min_length

    def decide(self, word: str) -> Decision:
        return KEEP if len(word.strip()) < self.min_length else TRANSLITERATE


class KeepListedWords:
    """Keep an explicit set of words untouched."""

    def __init__(self, words: Iterable[str]) -> None:
        self.words = {w.strip() for w in words if w.strip()}

    def decide(self, word: str) -> Decision:
        return KEEP if word.strip() in self.words else TRANSLITERATE


class PromptedChoice:
    """Ask a person for each new word; answers are remembered per word."""

    _ANSWERS: dict[str, Decision] = {
        "t": TRANSLITERATE,
        "transliterate": TRANSLITERATE,
        "k": KEEP,
        "keep": KEEP,
    }

    def __init__(self, ask: Callable[[str], str] = ask_console) -> None:
        self._ask = ask
        self._memo: dict[str, Decision] = {}

    def decide(self, word: str) -> Decision:
        if word in self._memo:
            return self._memo[word]
        reply = self._ask(f"Transliterate or keep '{word}'? [T/k] ").strip().lower()
        choice = self._ANSWERS.get(reply, TRANSLITERATE)
        logger.debug(f"Word choice for {word!r}: {choice}")
        self._memo[word] = choice
        return choice
