"""Tests for the speedreader CLI commands."""

import pytest
from typer.testing import CliRunner

from cli.main import _render_word, app
from speedreader.scraper.errors import Forbidden, UpstreamFailure
from speedreader.scraper.models import Article

runner = CliRunner()

_ARTICLE = Article(
    title="Bees",
    html_content="<p>Bees dance. They talk.</p>",
    plain_text="Bees dance. They talk.",
    byline="Jane Doe",
)


@pytest.fixture
def fake_load(monkeypatch):
    calls = []

    def load(url, cancel_event=None):
        calls.append(url)
        return _ARTICLE

    monkeypatch.setattr("cli.main.load_article", load)
    return calls


def test_tokenize_prints_class_and_delay():
    result = runner.invoke(app, ["tokenize", "--text", "Hi, there. Bye", "--wpm", "250"])
    assert result.exit_code == 0
    lines = result.stdout.strip().splitlines()
    assert lines == [
        "0\tpause\t490\tHi,",
        "1\tsentence_end\t740\tthere.",
        "2\tnone\t240\tBye",
    ]


def test_tokenize_reads_file(tmp_path):
    source = tmp_path / "words.txt"
    source.write_text("one\n\ntwo", encoding="utf-8")
    result = runner.invoke(app, ["tokenize", "--file", str(source)])
    assert result.exit_code == 0
    assert [line.split("\t")[-1] for line in result.stdout.strip().splitlines()] == ["one", "two"]


def test_tokenize_without_input_fails():
    result = runner.invoke(app, ["tokenize"])
    assert result.exit_code == 1
    assert "Provide --text or --file." in result.stdout


def test_extract_prints_article(fake_load):
    result = runner.invoke(app, ["extract", "--url", "https://example.com/bees"])
    assert result.exit_code == 0
    assert fake_load == ["https://example.com/bees"]
    assert "[extract] Title  : Bees" in result.stdout
    assert "[extract] Byline : Jane Doe" in result.stdout
    assert "[extract] Words  : 4" in result.stdout
    assert "Bees dance. They talk." in result.stdout


@pytest.mark.parametrize(
    "exc, expected",
    [
        (Forbidden(), "[extract] Error (400): URL is not allowed"),
        (UpstreamFailure("Failed to fetch: Not Found", upstream_status=404), "[extract] Error (502)"),
    ],
)
def test_extract_error_exits_nonzero(monkeypatch, exc, expected):
    def load(url, cancel_event=None):
        raise exc

    monkeypatch.setattr("cli.main.load_article", load)
    result = runner.invoke(app, ["extract", "--url", "http://10.0.0.1/"])
    assert result.exit_code == 1
    assert expected in result.stdout


def test_read_text_plays_every_word():
    result = runner.invoke(app, ["read", "--text", "one two three", "--wpm", "60000"])
    assert result.exit_code == 0
    lines = [line.strip() for line in result.stdout.splitlines()]
    assert lines == ["one", "two", "three"]


def test_read_url_uses_article_text(fake_load):
    result = runner.invoke(app, ["read", "--url", "https://example.com/bees", "--wpm", "60000"])
    assert result.exit_code == 0
    assert [line.strip() for line in result.stdout.splitlines()] == ["Bees", "dance.", "They", "talk."]


def test_read_empty_text():
    result = runner.invoke(app, ["read", "--text", "   "])
    assert result.exit_code == 0
    assert "[read] Nothing to read." in result.stdout


def test_read_without_source_fails():
    result = runner.invoke(app, ["read"])
    assert result.exit_code == 1
    assert "Provide --url or --text" in result.stdout


def test_render_word_aligns_focal_column():
    # Focal index for "reading" is 2, so two characters sit left of the column.
    rendered = _render_word("reading")
    assert rendered.startswith("    re")
