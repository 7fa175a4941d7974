"""
Tests for the command-line interface.
"""

import pytest

from romanizer import cli
from romanizer.decisions import KeepShortWords, PromptedChoice
from romanizer.pipeline import FunctionService

from conftest import make_document


@pytest.fixture
def env_file(tmp_path, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    path = tmp_path / "test.env"
    path.write_text("", encoding="utf-8")
    return path


@pytest.fixture
def fake_service(monkeypatch):
    """Replace the OpenAI-backed service with a scripted one."""
    built = {}

    def install(func):
        def fake_build(settings, strategy=None, *, use_async=False):
            built.update(settings=settings, strategy=strategy, use_async=use_async)
            return FunctionService(func)

        monkeypatch.setattr(cli, "build_service", fake_build)
        return built

    return install


def test_parse_args_defaults():
    """Test default CLI arguments."""
    args = cli.parse_args(["in.srt"])

    assert args.input == "in.srt"
    assert args.output is None
    assert args.max_chunk_size is None
    assert not args.use_async
    assert cli.make_strategy(args) is None


def test_parse_args_strategies():
    """Test word handling flags pick a strategy."""
    assert isinstance(cli.make_strategy(cli.parse_args(["a.srt", "--keep-short-words", "2"])), KeepShortWords)
    assert isinstance(cli.make_strategy(cli.parse_args(["a.srt", "--ask-words"])), PromptedChoice)


def test_parse_args_rejects_bad_chunk_size():
    """Test invalid chunk sizes exit with a usage error."""
    with pytest.raises(SystemExit):
        cli.parse_args(["a.srt", "--max-chunk-size", "0"])


def test_main_writes_output(tmp_path, env_file, fake_service):
    """Test a successful run writes the derived output file."""
    built = fake_service(lambda text: text.upper())
    src = tmp_path / "song.srt"
    src.write_text(make_document(5), encoding="utf-8")

    code = cli.main([str(src), "--env-file", str(env_file), "--max-chunk-size", "2", "--model", "gpt-x"])

    assert code == 0
    out = tmp_path / "song_hinglish.srt"
    assert out.read_text(encoding="utf-8") == make_document(5).strip().upper()
    assert built["settings"].max_chunk_size == 2
    assert built["settings"].model == "gpt-x"


def test_main_failure_without_partial(tmp_path, env_file, fake_service):
    """Test a failed run exits 1 and writes nothing by default."""
    calls = []

    def flaky(text):
        calls.append(text)
        if len(calls) == 2:
            raise RuntimeError("boom")
        return "A"

    fake_service(flaky)
    src = tmp_path / "song.srt"
    src.write_text(make_document(3), encoding="utf-8")
    out = tmp_path / "custom.srt"

    code = cli.main([str(src), "--env-file", str(env_file), "--max-chunk-size", "1", "-o", str(out)])

    assert code == 1
    assert not out.exists()


def test_main_failure_with_partial(tmp_path, env_file, fake_service):
    """Test --allow-partial writes the converted prefix."""
    calls = []

    def flaky(text):
        calls.append(text)
        if len(calls) == 2:
            raise RuntimeError("boom")
        return "A"

    fake_service(flaky)
    src = tmp_path / "song.srt"
    src.write_text(make_document(3), encoding="utf-8")
    out = tmp_path / "custom.srt"

    code = cli.main(
        [str(src), "--env-file", str(env_file), "--max-chunk-size", "1", "-o", str(out), "--allow-partial"]
    )

    assert code == 1
    assert out.read_text(encoding="utf-8") == "A"


def test_main_rejects_non_srt(tmp_path, env_file, fake_service):
    """Test non-SRT input is a usage error."""
    fake_service(lambda text: text)
    src = tmp_path / "notes.txt"
    src.write_text("hello", encoding="utf-8")

    assert cli.main([str(src), "--env-file", str(env_file)]) == 2


def test_main_missing_api_key(tmp_path, monkeypatch):
    """Test a missing API key is a configuration error."""
    monkeypatch.setenv("OPENAI_API_KEY", "")
    env = tmp_path / "empty.env"
    env.write_text("", encoding="utf-8")
    src = tmp_path / "song.srt"
    src.write_text(make_document(1), encoding="utf-8")

    assert cli.main([str(src), "--env-file", str(env)]) == 2
