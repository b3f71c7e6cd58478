"""Tests for ReaderSession: supersession, preferences, click-to-seek."""

from __future__ import annotations

import threading

import pytest

from speedreader.reader.pacing import PlaybackState
from speedreader.reader.sync import HIGHLIGHT_CLASS
from speedreader.reader.timers import ManualScheduler
from speedreader.scraper.errors import FetchCancelled, UpstreamFailure
from speedreader.scraper.models import Article
from speedreader.session import ReaderPreferences, ReaderSession


def _article(text: str) -> Article:
    return Article(
        title=text,
        html_content=f"<p>{text}</p>",
        plain_text=text,
    )


@pytest.fixture()
def clock() -> ManualScheduler:
    return ManualScheduler()


class TestLoading:
    def test_load_url_replaces_article_and_resets(self, clock) -> None:
        session = ReaderSession(clock, loader=lambda url, event: _article("alpha beta gamma"))
        session.engine.set_text("old text here")
        session.engine.play()
        clock.advance(10_000)

        article = session.load_url("https://example.com/")

        assert session.article is article
        assert session.engine.words == ("alpha", "beta", "gamma")
        assert session.engine.state is PlaybackState.IDLE
        assert session.engine.index == 0
        assert session.view is not None
        assert session.view.highlighted_index == 0

    def test_failure_propagates_and_keeps_previous_article(self, clock) -> None:
        articles = iter([_article("first article")])

        def loader(url, event):
            try:
                return next(articles)
            except StopIteration:
                raise UpstreamFailure("Failed to fetch: Bad Gateway") from None

        session = ReaderSession(clock, loader=loader)
        first = session.load_url("https://example.com/1")
        with pytest.raises(UpstreamFailure):
            session.load_url("https://example.com/2")
        assert session.article is first

    def test_newer_load_supersedes_in_flight_load(self, clock) -> None:
        started = threading.Event()
        release = threading.Event()
        seen_events: list[threading.Event] = []

        def loader(url, event):
            seen_events.append(event)
            if url == "slow":
                started.set()
                release.wait(timeout=5)
                return _article("slow words")
            return _article("fast words")

        session = ReaderSession(clock, loader=loader)
        results: list[Article | None] = []
        worker = threading.Thread(target=lambda: results.append(session.load_url("slow")))
        worker.start()
        assert started.wait(timeout=5)

        fast = session.load_url("fast")
        release.set()
        worker.join(timeout=5)

        assert results == [None]
        assert session.article is fast
        assert session.engine.words == ("fast", "words")
        assert seen_events[0].is_set()

    def test_errors_of_superseded_load_are_ignored(self, clock) -> None:
        started = threading.Event()
        release = threading.Event()

        def loader(url, event):
            if url == "slow":
                started.set()
                release.wait(timeout=5)
                raise UpstreamFailure()
            return _article("fine")

        session = ReaderSession(clock, loader=loader)
        results: list[Article | None] = []
        worker = threading.Thread(target=lambda: results.append(session.load_url("slow")))
        worker.start()
        assert started.wait(timeout=5)
        session.load_url("fast")
        release.set()
        worker.join(timeout=5)

        assert results == [None]
        assert session.article is not None and session.article.plain_text == "fine"

    def test_cancelled_fetch_returns_none(self, clock) -> None:
        def loader(url, event):
            raise FetchCancelled()

        session = ReaderSession(clock, loader=loader)
        assert session.load_url("https://example.com/") is None
        assert session.article is None

    def test_cancel_sets_event_of_in_flight_load(self, clock) -> None:
        captured: list[threading.Event] = []
        started = threading.Event()

        def loader(url, event):
            captured.append(event)
            started.set()
            event.wait(timeout=5)
            raise FetchCancelled()

        session = ReaderSession(clock, loader=loader)
        worker = threading.Thread(target=session.load_url, args=("https://example.com/",))
        worker.start()
        assert started.wait(timeout=5)
        session.cancel()
        worker.join(timeout=5)
        assert captured[0].is_set()
        assert session.article is None

    def test_listener_may_call_back_into_session_during_load(self, clock) -> None:
        session = ReaderSession(clock, loader=lambda url, event: _article("new words"))
        session.load_text("old words here")
        session.engine.play()

        def on_state(state):
            if state is PlaybackState.IDLE:
                session.cancel()

        session.engine.state_changed.subscribe(on_state)
        results: list[Article | None] = []
        worker = threading.Thread(target=lambda: results.append(session.load_url("x")))
        worker.start()
        worker.join(timeout=5)

        assert not worker.is_alive()
        assert results[0] is session.article
        assert session.engine.words == ("new", "words")

    def test_load_text_clears_article(self, clock) -> None:
        session = ReaderSession(clock, loader=lambda url, event: _article("a b"))
        session.load_url("x")
        session.load_text("plain words only")
        assert session.article is None
        assert session.view is None
        assert session.engine.words == ("plain", "words", "only")


class TestPreferences:
    def test_engine_follows_preferences(self, clock) -> None:
        prefs = ReaderPreferences(words_per_minute=600)
        session = ReaderSession(clock, preferences=prefs)
        session.load_text("one two three")
        session.engine.play()

        prefs.words_per_minute.set(300)
        assert session.engine.words_per_minute == 300
        clock.advance(199)
        assert session.engine.index == 0
        clock.advance(1)
        assert session.engine.index == 1

    def test_delay_preferences_reach_engine(self, clock) -> None:
        prefs = ReaderPreferences(words_per_minute=250)
        session = ReaderSession(clock, preferences=prefs)
        session.load_text("end. next")
        prefs.sentence_end_delay_ms.set(0)
        assert session.engine.current_delay_ms() == 240
        prefs.sentence_end_delay_ms.set(1000)
        assert session.engine.current_delay_ms() == 1240

    def test_close_unsubscribes_preferences(self, clock) -> None:
        prefs = ReaderPreferences(words_per_minute=600)
        session = ReaderSession(clock, preferences=prefs)
        session.close()
        prefs.words_per_minute.set(200)
        assert session.engine.words_per_minute == 600
        assert len(prefs.words_per_minute.changed) == 0


class TestClickToSeek:
    def test_click_seeks_and_highlights(self, clock) -> None:
        session = ReaderSession(
            clock,
            loader=lambda url, event: Article(
                title=None,
                html_content='<p>Hello, <a href="x">world</a>, friend.</p>',
                plain_text="Hello, world, friend.",
            ),
        )
        session.load_url("x")
        index = session.click(session.view.span_for(2))

        assert index == 2
        assert session.engine.index == 2
        assert session.engine.current_word == "friend."
        assert f'class="{HIGHLIGHT_CLASS}"' in session.view.html

    def test_click_without_article_is_ignored(self, clock) -> None:
        session = ReaderSession(clock)
        assert session.click(None) is None

    def test_playback_moves_highlight(self, clock) -> None:
        session = ReaderSession(
            clock,
            preferences=ReaderPreferences(words_per_minute=600),
            loader=lambda url, event: _article("one two three"),
        )
        session.load_url("x")
        session.engine.play()
        clock.advance(100)
        assert session.view.highlighted_index == 1
