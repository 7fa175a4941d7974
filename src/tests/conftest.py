"""
Shared fixtures for the romanizer tests.
"""

import pytest


def make_block(i: int, text: str | None = None) -> str:
    """Build one SRT block with index ``i``."""
    start = f"00:00:{i % 60:02},000"
    end = f"00:00:{i % 60:02},900"
    return f"{i}\n{start} --> {end}\n{text or f'line {i}'}"


def make_document(n: int) -> str:
    return "\n\n".join(make_block(i) for i in range(1, n + 1)) + "\n"


@pytest.fixture
def sample_srt() -> str:
    return (
        "1\n00:00:01,000 --> 00:00:02,500\nनमस्ते दोस्तों\n\n"
        "2\n00:00:02,500 --> 00:00:05,000\nआज हम पियानो बजाएंगे\n"
        "दूसरी लाइन\n\n"
        "3\n00:00:05,000 --> 00:00:07,500\nस्टूडियो में\n"
    )
