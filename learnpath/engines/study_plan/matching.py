"""
Content matching rules.

A phase selects content with an ordered list of rules. CategoryMatch is an
exact comparison on the item's category; KeywordMatch is the text heuristic
used when no category applies (challenges have no category at all).

Keyword semantics:
- the searchable text is lower-cased ``title + " " + description``
- an item matches when ANY keyword matches
- a keyword made of several words ("async await", "object-oriented")
  matches when ALL of its words occur somewhere in the text
- a single-word keyword is a plain substring test
"""

import re
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, TypeVar, Union

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")

_WORD_SPLIT = re.compile(r"[\s\-]+")


class CategoryMatch(BaseModel):
    """Select items whose category equals ``slug`` exactly."""

    model_config = ConfigDict(frozen=True)

    slug: str

    def matches(self, category: Optional[str], text: str) -> bool:
        return category is not None and category == self.slug


class KeywordMatch(BaseModel):
    """Select items whose text contains any of ``words``."""

    model_config = ConfigDict(frozen=True)

    words: Tuple[str, ...]

    def matches(self, category: Optional[str], text: str) -> bool:
        return keyword_matches(text, self.words)


MatchRule = Union[CategoryMatch, KeywordMatch]


def _keyword_parts(keyword: str) -> List[str]:
    return [part for part in _WORD_SPLIT.split(keyword.lower().strip()) if part]


def keyword_matches(text: str, keywords: Iterable[str]) -> bool:
    """Return True when ``text`` satisfies any keyword."""
    haystack = text.lower()
    for keyword in keywords:
        parts = _keyword_parts(keyword)
        if not parts:
            continue
        if len(parts) == 1:
            if parts[0] in haystack:
                return True
        elif all(part in haystack for part in parts):
            return True
    return False


def searchable_text(title: str, description: Optional[str]) -> str:
    return f"{title} {description or ''}".lower()


def select_first_matching(
    items: Sequence[T],
    rules: Sequence[MatchRule],
    *,
    category_of: Callable[[T], Optional[str]],
    text_of: Callable[[T], str],
    exclude: Callable[[T], bool] = lambda item: False,
) -> Tuple[List[T], Optional[MatchRule]]:
    """
    Evaluate ``rules`` in priority order and return the matches of the first
    rule that selects anything, together with that rule.

    Items for which ``exclude`` is true are never selected. Natural order of
    ``items`` is preserved. Returns ``([], None)`` when no rule matches.
    """
    for rule in rules:
        matched = [
            item
            for item in items
            if not exclude(item) and rule.matches(category_of(item), text_of(item))
        ]
        if matched:
            return matched, rule
    return [], None
