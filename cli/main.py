"""Speed reader CLI — entry-point for the backend operations.

Usage:
    python cli/main.py --help

Commands:
    extract   → fetch a URL behind the SSRF guard and print its article text
    tokenize  → show each word with its punctuation class and display delay
    read      → pace a URL or text in the terminal, one word at a time
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from speedreader.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import asyncio
import logging
from typing import Optional

import typer

from speedreader.config import settings
from speedreader.reader.focal import word_parts
from speedreader.reader.pacing import PacingEngine, PlaybackState, word_delay_ms
from speedreader.reader.timers import AsyncioScheduler
from speedreader.reader.tokenizer import tokenize
from speedreader.scraper.errors import ScraperError
from speedreader.scraper.pipeline import load_article

app = typer.Typer(
    name="speedreader",
    help="Speed reader backend CLI.",
    no_args_is_help=True,
)

_FOCAL_COLUMN = 6


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )


def _read_source(text: Optional[str], file: Optional[Path]) -> str:
    if text is not None:
        return text
    if file is not None:
        return file.read_text(encoding="utf-8")
    typer.echo("Provide --text or --file.")
    raise typer.Exit(1)


def _render_word(word: str) -> str:
    """Right-align the left part so the focal character sits in a fixed column."""
    left, focal, right = word_parts(word)
    padding = " " * max(0, _FOCAL_COLUMN - len(left))
    return f"{padding}{left}{typer.style(focal, fg=typer.colors.RED, bold=True)}{right}"


# ---------------------------------------------------------------------------
# extract
# ---------------------------------------------------------------------------
@app.command("extract")
def extract(
    url: str = typer.Option(..., help="Article URL."),
) -> None:
    """Fetch a URL and print the extracted article text to stdout."""
    typer.echo(f"[extract] Fetching {url!r} …")
    try:
        article = load_article(url)
    except ScraperError as exc:
        typer.echo(f"[extract] Error ({exc.status_code}): {exc.message}")
        raise typer.Exit(1)

    typer.echo(f"[extract] Title  : {article.title or '(none)'}")
    typer.echo(f"[extract] Byline : {article.byline or '(none)'}")
    typer.echo(f"[extract] Words  : {len(tokenize(article.plain_text))}")
    typer.echo("")
    typer.echo(article.plain_text)


# ---------------------------------------------------------------------------
# tokenize
# ---------------------------------------------------------------------------
@app.command("tokenize")
def tokenize_cmd(
    text: Optional[str] = typer.Option(None, help="Text to tokenize."),
    file: Optional[Path] = typer.Option(None, exists=True, dir_okay=False, help="Read text from a file."),
    wpm: int = typer.Option(settings.default_wpm, min=1, help="Words per minute."),
) -> None:
    """Print index, punctuation class, delay (ms) and word for every token."""
    source = _read_source(text, file)
    for token in tokenize(source):
        delay = word_delay_ms(
            token.text,
            wpm,
            settings.sentence_end_delay_ms,
            settings.speech_break_delay_ms,
            settings.min_word_delay_ms,
        )
        typer.echo(f"{token.index}\t{token.punctuation.value}\t{delay}\t{token.text}")


# ---------------------------------------------------------------------------
# read
# ---------------------------------------------------------------------------
async def _play(text: str, wpm: int) -> None:
    loop = asyncio.get_running_loop()
    finished: asyncio.Future[None] = loop.create_future()
    engine = PacingEngine(AsyncioScheduler(loop), text, words_per_minute=wpm)

    def show(index: int) -> None:
        typer.echo(_render_word(engine.words[index]))

    def on_state(state: PlaybackState) -> None:
        if state is PlaybackState.FINISHED and not finished.done():
            finished.set_result(None)

    engine.index_changed.subscribe(show)
    engine.state_changed.subscribe(on_state)
    show(engine.index)
    engine.play()
    try:
        await finished
    finally:
        engine.stop()


@app.command("read")
def read(
    url: Optional[str] = typer.Option(None, help="Article URL to read."),
    text: Optional[str] = typer.Option(None, help="Text to read."),
    wpm: int = typer.Option(settings.default_wpm, min=1, help="Words per minute."),
) -> None:
    """Pace a URL's article (or given text) one word at a time."""
    if url is not None:
        try:
            source = load_article(url).plain_text
        except ScraperError as exc:
            typer.echo(f"[read] Error ({exc.status_code}): {exc.message}")
            raise typer.Exit(1)
    elif text is not None:
        source = text
    else:
        typer.echo("[read] Provide --url or --text.")
        raise typer.Exit(1)

    if not tokenize(source):
        typer.echo("[read] Nothing to read.")
        return

    try:
        asyncio.run(_play(source, wpm))
    except KeyboardInterrupt:
        typer.echo("\n[read] Stopped.")


if __name__ == "__main__":
    app()
