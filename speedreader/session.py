"""Reader session: one article, one pacing engine, one highlighted view.

A session is what a client holds while reading.  Loading a new URL
supersedes any load still in flight: the earlier fetch is cancelled and
whatever it eventually produces (article or error) is ignored.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from bs4 import NavigableString, Tag

from speedreader.config import settings
from speedreader.events import Disposer, Observable
from speedreader.reader.pacing import PacingEngine
from speedreader.reader.sync import ArticleView
from speedreader.reader.timers import Scheduler
from speedreader.scraper.errors import FetchCancelled, ScraperError
from speedreader.scraper.models import Article
from speedreader.scraper.pipeline import load_article

logger = logging.getLogger(__name__)

ArticleLoader = Callable[[str, threading.Event], Article]


class ReaderPreferences:
    """Process-owned reader settings, each one observable."""

    def __init__(
        self,
        words_per_minute: int | None = None,
        sentence_end_delay_ms: int | None = None,
        speech_break_delay_ms: int | None = None,
    ) -> None:
        self.words_per_minute = Observable(words_per_minute or settings.default_wpm)
        self.sentence_end_delay_ms = Observable(
            settings.sentence_end_delay_ms if sentence_end_delay_ms is None else sentence_end_delay_ms
        )
        self.speech_break_delay_ms = Observable(
            settings.speech_break_delay_ms if speech_break_delay_ms is None else speech_break_delay_ms
        )


class ReaderSession:
    def __init__(
        self,
        scheduler: Scheduler,
        preferences: ReaderPreferences | None = None,
        loader: ArticleLoader | None = None,
    ) -> None:
        self.preferences = preferences or ReaderPreferences()
        self.engine = PacingEngine(
            scheduler,
            words_per_minute=self.preferences.words_per_minute.value,
            sentence_end_delay_ms=self.preferences.sentence_end_delay_ms.value,
            speech_break_delay_ms=self.preferences.speech_break_delay_ms.value,
        )
        self.article: Article | None = None
        self.view: ArticleView | None = None

        self._loader: ArticleLoader = loader or (lambda url, event: load_article(url, event))
        # Reentrant: engine listeners fired from _apply may call cancel().
        self._lock = threading.RLock()
        self._generation = 0
        self._cancel_event: threading.Event | None = None
        self._view_disposer: Disposer | None = None
        self._disposers: list[Disposer] = [
            self.preferences.words_per_minute.subscribe(self.engine.set_words_per_minute),
            self.preferences.sentence_end_delay_ms.subscribe(
                lambda ms: self.engine.set_delays(sentence_end_delay_ms=ms)
            ),
            self.preferences.speech_break_delay_ms.subscribe(
                lambda ms: self.engine.set_delays(speech_break_delay_ms=ms)
            ),
        ]

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load_url(self, url: str) -> Article | None:
        """Fetch *url* and make its article current.

        Returns ``None`` when a later load superseded this one before it
        finished.  Errors from a superseded load are swallowed; errors from
        the current load propagate as :class:`ScraperError`.
        """
        with self._lock:
            if self._cancel_event is not None:
                self._cancel_event.set()
            self._generation += 1
            generation = self._generation
            cancel_event = threading.Event()
            self._cancel_event = cancel_event

        try:
            article = self._loader(url, cancel_event)
        except FetchCancelled:
            logger.info("Load of %s cancelled", url)
            return None
        except ScraperError:
            if not self._is_current(generation):
                return None
            raise

        with self._lock:
            if generation != self._generation:
                logger.info("Discarding superseded load of %s", url)
                return None
            self._cancel_event = None
            self._apply(article)
        return article

    def load_text(self, text: str) -> None:
        """Read plain *text* with no article markup."""
        self.cancel()
        self._unbind_view()
        self.article = None
        self.view = None
        self.engine.set_text(text)

    def cancel(self) -> None:
        """Abandon any in-flight load (caller teardown or navigation)."""
        with self._lock:
            self._generation += 1
            if self._cancel_event is not None:
                self._cancel_event.set()
                self._cancel_event = None

    def close(self) -> None:
        self.cancel()
        self.engine.stop()
        self._unbind_view()
        for dispose in self._disposers:
            dispose()
        self._disposers.clear()

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------
    def click(self, element: Tag | NavigableString | None) -> int | None:
        """Click-to-seek on a node of the highlighted view."""
        if self.view is None:
            return None
        return self.view.click(element, self.engine)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def _unbind_view(self) -> None:
        if self._view_disposer is not None:
            self._view_disposer()
            self._view_disposer = None

    def _apply(self, article: Article) -> None:
        self._unbind_view()
        self.article = article
        self.view = ArticleView(article.html_content)
        self.engine.set_text(article.plain_text)
        self._view_disposer = self.view.bind(self.engine)
