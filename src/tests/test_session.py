"""
Tests for the load/convert/save session.
"""

import asyncio

import pytest

from romanizer.errors import ConfigurationError, InvalidDocumentError, NoDocumentError
from romanizer.pipeline import AsyncFunctionService, FunctionService
from romanizer.session import ConversionSession

from conftest import make_document


def _upper_service():
    return FunctionService(lambda text: text.upper())


def test_load_convert_save(tmp_path, sample_srt):
    """Test the full flow writes <name>_hinglish.srt next to the source."""
    src = tmp_path / "episode01.srt"
    src.write_text(sample_srt, encoding="utf-8")
    session = ConversionSession(FunctionService(lambda text: text.replace("पियानो", "Piano")))

    session.load(src)
    result = session.convert()
    out_path = session.save()

    assert result.succeeded
    assert out_path == tmp_path / "episode01_hinglish.srt"
    saved = out_path.read_text(encoding="utf-8")
    assert "Piano" in saved
    assert saved == sample_srt.strip().replace("पियानो", "Piano")


def test_load_rejects_non_srt(tmp_path):
    """Test only .srt files are accepted and the session is cleared."""
    bad = tmp_path / "notes.txt"
    bad.write_text("hello", encoding="utf-8")
    session = ConversionSession(_upper_service())
    session.load_text(make_document(1), name="a.srt")

    with pytest.raises(InvalidDocumentError):
        session.load(bad)
    assert session.document is None
    assert session.source_name is None


def test_convert_requires_document():
    """Test converting with nothing loaded fails."""
    session = ConversionSession(_upper_service())

    with pytest.raises(NoDocumentError):
        session.convert()


def test_loading_new_document_discards_result():
    """Test changing the source document resets the previous result."""
    session = ConversionSession(_upper_service())
    session.load_text(make_document(2), name="first.srt")
    session.convert()
    assert session.result is not None

    session.load_text(make_document(1), name="second.srt")

    assert session.result is None
    assert session.output_name == "second_hinglish.srt"


def test_save_refuses_partial_unless_allowed(tmp_path):
    """Test failed runs only save with allow_partial."""
    calls = []

    def flaky(text: str) -> str:
        calls.append(text)
        if len(calls) == 2:
            raise RuntimeError("boom")
        return "A"

    session = ConversionSession(FunctionService(flaky), max_chunk_size=1, output_suffix="_roman")
    session.load_text(make_document(3), name="show.srt")
    result = session.convert()

    assert not result.succeeded
    with pytest.raises(NoDocumentError):
        session.save(tmp_path)

    out_path = session.save(tmp_path / "out", allow_partial=True)
    assert out_path == tmp_path / "out" / "show_roman.srt"
    assert out_path.read_text(encoding="utf-8") == "A"


def test_save_without_output(tmp_path):
    """Test an empty document leaves nothing to save."""
    session = ConversionSession(_upper_service())
    session.load_text("  \n", name="blank.srt")

    assert session.convert().is_empty
    with pytest.raises(NoDocumentError):
        session.save(tmp_path)


def test_convert_async(tmp_path):
    """Test the async conversion path."""

    async def lower(text: str) -> str:
        return text.lower()

    session = ConversionSession(AsyncFunctionService(lower), max_chunk_size=2)
    session.load_text(make_document(5), name="clip.srt")

    result = asyncio.run(session.convert_async())

    assert result.succeeded
    assert result.total == 3
    assert result.output == make_document(5).strip().lower()


def test_reset():
    """Test reset forgets everything."""
    session = ConversionSession(_upper_service())
    session.load_text(make_document(1), name="a.srt")
    session.convert()

    session.reset()

    assert session.document is None
    assert session.result is None
    assert session.output_name == "converted_hinglish.srt"


def test_cancel_keeps_converted_prefix():
    """Test cancelling from the progress callback stops the session's run."""
    session = ConversionSession(FunctionService(lambda text: "ok"), max_chunk_size=1)
    session.pipeline.on_progress = lambda fraction: session.cancel()
    session.load_text(make_document(3), name="a.srt")

    result = session.convert()

    assert result.status.value == "cancelled"
    assert result.output == "ok"


def test_mismatched_service_kind():
    """Test convert() needs a sync service and convert_async() an async one."""

    async def lower(text: str) -> str:
        return text.lower()

    async_session = ConversionSession(AsyncFunctionService(lower))
    async_session.load_text(make_document(1), name="a.srt")
    with pytest.raises(ConfigurationError):
        async_session.convert()
    assert async_session.result is None

    sync_session = ConversionSession(_upper_service())
    sync_session.load_text(make_document(1), name="a.srt")
    with pytest.raises(ConfigurationError):
        asyncio.run(sync_session.convert_async())
    assert sync_session.result is None


def test_superseded_async_convert_keeps_newer_result():
    """Test an older async conversion finishing late does not replace the newer result."""
    release = asyncio.Event()
    calls: list[str] = []

    async def transliterate(text: str) -> str:
        calls.append(text)
        if len(calls) == 1:
            await release.wait()
            return "OLD"
        return "NEW"

    session = ConversionSession(AsyncFunctionService(transliterate), max_chunk_size=1)
    session.load_text(make_document(2), name="a.srt")

    async def scenario():
        first = asyncio.create_task(session.convert_async())
        await asyncio.sleep(0)
        second = await session.convert_async()
        release.set()
        return await first, second

    first, second = asyncio.run(scenario())

    assert first.status.value == "cancelled"
    assert first.output == "OLD"
    assert second.succeeded
    assert second.output == "NEW\n\nNEW"
    assert session.result is second
