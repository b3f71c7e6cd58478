"""Word-index synchronizer between plain text and rendered article markup.

Both views enumerate words the same way: walk the text nodes of the markup
in document order and split each one with the tokenizer's whitespace rule.
The plain text handed to the pacing engine is produced by that same walk, so
``tokenize(extract_text_from_html(html))[i]`` is always the word wrapped in
the ``<span data-word-index="i">`` of ``wrap_words_in_html(html)``.

Before either walk, punctuation that rendering pushed out of an inline
element (``<a>world</a>, friend``) is moved back onto the preceding word.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, NavigableString, Tag

from speedreader.events import Disposer
from speedreader.reader.pacing import PacingEngine
from speedreader.reader.tokenizer import WordToken, normalize_spaces, parse_words

WORD_INDEX_ATTR = "data-word-index"
HIGHLIGHT_CLASS = "speed-reader-highlight"

INLINE_TAGS = frozenset(
    {
        "a", "abbr", "b", "bdi", "bdo", "cite", "code", "data", "dfn", "em",
        "i", "kbd", "mark", "q", "s", "samp", "small", "span", "strong", "sub",
        "sup", "time", "u", "var",
    }
)
_SKIPPED_PARENTS = frozenset({"script", "style", "template", "noscript"})
_LEADING_PUNCT_RE = re.compile(r"^[.,;:!?)\]}\"'”’…—]+")


# ---------------------------------------------------------------------------
# Tree helpers
# ---------------------------------------------------------------------------

def _parse(html: str) -> tuple[BeautifulSoup, Tag]:
    soup = BeautifulSoup(html, "html.parser")
    root = soup.body if soup.body is not None else soup
    return soup, root


def _text_nodes(root: Tag) -> list[NavigableString]:
    """Text-bearing nodes under *root* in document order (no comments, no scripts)."""
    nodes: list[NavigableString] = []
    for node in root.descendants:
        if type(node) is not NavigableString:
            continue
        if any(parent.name in _SKIPPED_PARENTS for parent in node.parents):
            continue
        nodes.append(node)
    return nodes


def _last_text_node(tag: Tag) -> NavigableString | None:
    for node in reversed(_text_nodes(tag)):
        if str(node):
            return node
    return None


def reattach_punctuation(root: Tag) -> None:
    """Move leading punctuation of a text node onto the word inside the inline
    element just before it.  Mutates the tree in place."""
    for node in _text_nodes(root):
        match = _LEADING_PUNCT_RE.match(str(node))
        if match is None:
            continue
        prev = node.previous_sibling
        if not isinstance(prev, Tag) or prev.name not in INLINE_TAGS:
            continue
        target = _last_text_node(prev)
        if target is None or str(target)[-1].isspace():
            continue

        punct = match.group(0)
        target.replace_with(NavigableString(str(target) + punct))
        rest = str(node)[len(punct):]
        if rest:
            node.replace_with(NavigableString(rest))
        else:
            node.extract()


def _prepare(html: str) -> tuple[BeautifulSoup, Tag]:
    soup, root = _parse(html)
    # Only spans created by wrap_words_in_html may carry a word index.
    for tag in root.find_all(attrs={WORD_INDEX_ATTR: True}):
        del tag[WORD_INDEX_ATTR]
    reattach_punctuation(root)
    return soup, root


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def markup_tokens(html: str) -> list[WordToken]:
    """Indexed words of *html*, enumerated exactly as they will be wrapped."""
    _soup, root = _prepare(html)
    words = [word for node in _text_nodes(root) for word in parse_words(str(node))]
    return [WordToken(i, word) for i, word in enumerate(words)]


def extract_text_from_html(html: str) -> str:
    """Plain text of *html* whose tokenization matches :func:`markup_tokens`."""
    return " ".join(token.text for token in markup_tokens(html))


def wrap_words_in_html(html: str) -> str:
    """Wrap every word of *html* in ``<span data-word-index="N">``.

    Separator whitespace is kept as plain text between spans.  When a text
    node's first word directly follows a word from an earlier node, a single
    space is inserted so the two render as separate words.
    """
    soup, root = _prepare(html)
    index = 0
    prev_ended_in_word = False

    for node in _text_nodes(root):
        text = normalize_spaces(str(node))
        if not text.strip():
            if text:
                prev_ended_in_word = False
            continue

        replacement: list[NavigableString | Tag] = []
        if prev_ended_in_word and not text.startswith(" "):
            replacement.append(NavigableString(" "))
        for part in re.split(r"( )", text):
            if part == " ":
                replacement.append(NavigableString(" "))
            elif part:
                span = soup.new_tag("span", attrs={WORD_INDEX_ATTR: str(index)})
                span.string = part
                replacement.append(span)
                index += 1

        for new_node in replacement:
            node.insert_before(new_node)
        node.extract()
        prev_ended_in_word = not text.endswith(" ")

    return root.decode_contents()


def word_index_of(element: Tag | NavigableString | None) -> int | None:
    """Index of the word span containing *element* (the element itself or
    its nearest ancestor), or ``None`` when it is not inside a word."""
    current = element
    while current is not None:
        if isinstance(current, Tag) and current.has_attr(WORD_INDEX_ATTR):
            try:
                return int(current[WORD_INDEX_ATTR])
            except (TypeError, ValueError):
                return None
        current = current.parent
    return None


class ArticleView:
    """Highlighted full-text rendering that follows a pacing index.

    The view only reads the engine's index; clicks go back through
    :meth:`PacingEngine.seek`.
    """

    def __init__(self, html: str) -> None:
        self._soup, self._root = _parse(wrap_words_in_html(html))
        self._spans: dict[int, Tag] = {}
        for span in self._root.find_all(attrs={WORD_INDEX_ATTR: True}):
            index = word_index_of(span)
            if index is not None:
                self._spans[index] = span
        self._highlighted: Tag | None = None
        self.highlighted_index: int | None = None

    @property
    def word_count(self) -> int:
        return len(self._spans)

    @property
    def words(self) -> list[str]:
        return [self._spans[i].get_text() for i in range(len(self._spans))]

    @property
    def html(self) -> str:
        return self._root.decode_contents()

    def span_for(self, index: int) -> Tag | None:
        return self._spans.get(index)

    def highlight(self, index: int) -> Tag | None:
        """Move the highlight class to word *index*; returns the span, if any."""
        if self._highlighted is not None:
            classes = [c for c in self._highlighted.get("class", []) if c != HIGHLIGHT_CLASS]
            if classes:
                self._highlighted["class"] = classes
            else:
                del self._highlighted["class"]
            self._highlighted = None
            self.highlighted_index = None

        span = self._spans.get(index)
        if span is not None:
            span["class"] = [*span.get("class", []), HIGHLIGHT_CLASS]
            self._highlighted = span
            self.highlighted_index = index
        return span

    def bind(self, engine: PacingEngine) -> Disposer:
        """Follow *engine*'s index; returns a disposer that stops following."""
        self.highlight(engine.index)
        return engine.index_changed.subscribe(self.highlight)

    def click(self, element: Tag | NavigableString | None, engine: PacingEngine) -> int | None:
        """Seek *engine* to the word under *element*; returns the index used."""
        index = word_index_of(element)
        if index is not None:
            engine.seek(index)
        return index
