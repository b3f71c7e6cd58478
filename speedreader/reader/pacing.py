"""Pacing scheduler: advances a word index over time at a words-per-minute rate.

States::

    IDLE ──play──▶ PLAYING ──pause──▶ PAUSED ──play──▶ PLAYING
                      │
                      └─(advance past last word)──▶ FINISHED ──play──▶ PLAYING (from 0)

Per-word delay, with delays given at the 250 wpm reference rate::

    base  = max(30, round(60000 / wpm))
    extra = round(sentence_end_delay * 250 / wpm)   # word ends a sentence
          | round(speech_break_delay * 250 / wpm)   # word ends with , : ; — --
          | 0

At most one advance is pending at any time: every transition cancels the
outstanding timer before optionally scheduling a new one.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Iterable

from speedreader.config import settings
from speedreader.events import Signal
from speedreader.reader.timers import Scheduler, TimerHandle
from speedreader.reader.tokenizer import PunctuationClass, classify, parse_words

REFERENCE_WPM = 250


class PlaybackState(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    FINISHED = "finished"


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def word_delay_ms(
    word: str,
    words_per_minute: int,
    sentence_end_delay_ms: int = 500,
    speech_break_delay_ms: int = 250,
    min_delay_ms: int = 30,
) -> int:
    """How long *word* stays on screen before the next one, in milliseconds."""
    if words_per_minute <= 0:
        raise ValueError(f"words_per_minute must be positive, got {words_per_minute}")

    base = max(min_delay_ms, round_half_up(60000 / words_per_minute))
    scale = REFERENCE_WPM / words_per_minute

    punctuation = classify(word)
    if punctuation is PunctuationClass.SENTENCE_END:
        extra = round_half_up(sentence_end_delay_ms * scale)
    elif punctuation is PunctuationClass.PAUSE:
        extra = round_half_up(speech_break_delay_ms * scale)
    else:
        extra = 0
    return base + extra


class PacingEngine:
    """Drives one-word-at-a-time playback over a fixed word sequence.

    ``index_changed`` and ``state_changed`` are emitted after each transition
    has been fully applied, so listeners may call back into the engine.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        text: str = "",
        *,
        words_per_minute: int | None = None,
        sentence_end_delay_ms: int | None = None,
        speech_break_delay_ms: int | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._words: list[str] = parse_words(text)
        self._index = 0
        self._state = PlaybackState.IDLE
        self._pending: TimerHandle | None = None

        self._wpm = settings.default_wpm
        self._sentence_end_delay_ms = settings.sentence_end_delay_ms
        self._speech_break_delay_ms = settings.speech_break_delay_ms
        if words_per_minute is not None:
            self._wpm = _check_wpm(words_per_minute)
        if sentence_end_delay_ms is not None:
            self._sentence_end_delay_ms = _check_delay(sentence_end_delay_ms)
        if speech_break_delay_ms is not None:
            self._speech_break_delay_ms = _check_delay(speech_break_delay_ms)

        self.index_changed: Signal[int] = Signal()
        self.state_changed: Signal[PlaybackState] = Signal()

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------
    @property
    def words(self) -> tuple[str, ...]:
        return tuple(self._words)

    @property
    def token_count(self) -> int:
        return len(self._words)

    @property
    def index(self) -> int:
        return self._index

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state is PlaybackState.PLAYING

    @property
    def words_per_minute(self) -> int:
        return self._wpm

    @property
    def current_word(self) -> str:
        return self._words[self._index] if self._words else ""

    @property
    def has_pending_advance(self) -> bool:
        return self._pending is not None

    @property
    def progress(self) -> tuple[int, int]:
        """``(position, total)`` with a one-based position, ``(0, 0)`` when empty."""
        if not self._words:
            return (0, 0)
        return (self._index + 1, len(self._words))

    def current_delay_ms(self) -> int:
        return word_delay_ms(
            self.current_word,
            self._wpm,
            self._sentence_end_delay_ms,
            self._speech_break_delay_ms,
            settings.min_word_delay_ms,
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def play(self) -> None:
        """Start or resume playback; restarts from the first word when finished."""
        if not self._words or self._state is PlaybackState.PLAYING:
            return
        before = self._snapshot()
        self._cancel_pending()
        if self._state is PlaybackState.FINISHED:
            self._index = 0
        self._state = PlaybackState.PLAYING
        self._schedule_next()
        self._notify(before)

    def pause(self) -> None:
        if self._state is not PlaybackState.PLAYING:
            return
        before = self._snapshot()
        self._cancel_pending()
        self._state = PlaybackState.PAUSED
        self._notify(before)

    def toggle(self) -> None:
        """Play/pause/restart from a single control."""
        if self._state is PlaybackState.PLAYING:
            self.pause()
        else:
            self.play()

    def seek(self, index: int) -> None:
        """Move to *index* (clamped) without starting or stopping playback."""
        before = self._snapshot()
        self._cancel_pending()
        last = max(0, len(self._words) - 1)
        self._index = min(max(int(index), 0), last)

        if self._state is PlaybackState.PLAYING:
            self._schedule_next()
        elif self._state is PlaybackState.FINISHED:
            if self._index < last:
                self._state = PlaybackState.PAUSED
        elif self._state is PlaybackState.IDLE and self._index != 0:
            self._state = PlaybackState.PAUSED
        self._notify(before)

    def set_text(self, text: str) -> None:
        self.set_words(parse_words(text))

    def set_words(self, words: Iterable[str]) -> None:
        """Replace the word sequence; always returns to IDLE at index 0."""
        before = self._snapshot()
        self._cancel_pending()
        self._words = list(words)
        self._index = 0
        self._state = PlaybackState.IDLE
        self._notify(before)

    def set_words_per_minute(self, words_per_minute: int) -> None:
        words_per_minute = _check_wpm(words_per_minute)
        if words_per_minute == self._wpm:
            return
        self._wpm = words_per_minute
        self._reschedule()

    def set_delays(
        self,
        *,
        sentence_end_delay_ms: int | None = None,
        speech_break_delay_ms: int | None = None,
    ) -> None:
        if sentence_end_delay_ms is not None:
            self._sentence_end_delay_ms = _check_delay(sentence_end_delay_ms)
        if speech_break_delay_ms is not None:
            self._speech_break_delay_ms = _check_delay(speech_break_delay_ms)
        self._reschedule()

    def stop(self) -> None:
        """Cancel any pending advance and pause (used on teardown)."""
        self._cancel_pending()
        if self._state is PlaybackState.PLAYING:
            before = self._snapshot()
            self._state = PlaybackState.PAUSED
            self._notify(before)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _snapshot(self) -> tuple[int, PlaybackState]:
        return (self._index, self._state)

    def _notify(self, before: tuple[int, PlaybackState]) -> None:
        # Capture first: a listener may trigger (and announce) a further transition.
        (old_index, old_state), (new_index, new_state) = before, self._snapshot()
        if new_index != old_index:
            self.index_changed.emit(new_index)
        if new_state is not old_state:
            self.state_changed.emit(new_state)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _schedule_next(self) -> None:
        self._cancel_pending()
        self._pending = self._scheduler.call_later(self.current_delay_ms(), self._advance)

    def _reschedule(self) -> None:
        # Settings changes apply from the next scheduled advance onwards.
        if self._state is PlaybackState.PLAYING:
            self._schedule_next()

    def _advance(self) -> None:
        self._pending = None
        if self._state is not PlaybackState.PLAYING:
            return
        before = self._snapshot()
        if self._index >= len(self._words) - 1:
            self._state = PlaybackState.FINISHED
        else:
            self._index += 1
            self._schedule_next()
        self._notify(before)


def _check_wpm(words_per_minute: int) -> int:
    if words_per_minute <= 0:
        raise ValueError(f"words_per_minute must be positive, got {words_per_minute}")
    return int(words_per_minute)


def _check_delay(delay_ms: int) -> int:
    if delay_ms < 0:
        raise ValueError(f"delay must be non-negative, got {delay_ms}")
    return int(delay_ms)
