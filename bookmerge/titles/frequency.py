"""Batch-wide title frequency profiling and prefix cleaning.

Responsibilities:
- Count plain tokens across every title of one merge batch.
- Strip the leading run of boilerplate tokens from each title.

Key types:
- `FrequencyTable`: immutable plain-token occurrence counts for one batch.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

from .tokenizer import TokenKind, tokenize


@dataclass(frozen=True, slots=True)
class FrequencyTable:
    """Read-only occurrence counts of plain title tokens.

    Attributes:
        counts: Mapping from exact plain-token text to its occurrence count
            across all titles of the batch.
    """

    counts: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))

    def count(self, text: str) -> int:
        """Return occurrences of one plain token, `0` when absent."""

        return self.counts.get(text, 0)

    def __len__(self) -> int:
        return len(self.counts)


def build_frequency(titles: Iterable[str]) -> FrequencyTable:
    """Build plain-token occurrence counts for a batch of titles.

    Every occurrence counts, so a title repeating a word contributes twice.
    Bracketed tokens never contribute.
    """

    counter: Counter[str] = Counter()
    for title in titles:
        counter.update(
            token.text for token in tokenize(title) if token.kind is TokenKind.PLAIN
        )
    return FrequencyTable(counts=MappingProxyType(dict(counter)))


def clean_title(
    title: str,
    table: FrequencyTable,
    total_titles: int,
    threshold: float,
) -> str:
    """Drop the leading run of boilerplate plain tokens from one title.

    A plain token is boilerplate when `count / total_titles >= threshold`.
    Stripping ends at the first kept plain token or at any bracketed token,
    and every later token is kept regardless of frequency. An empty result
    is valid output; callers choose their own fallback.

    Raises:
        ValueError: If `total_titles < 1` or `threshold` is outside `(0, 1]`.
    """

    if isinstance(total_titles, bool) or total_titles < 1:
        raise ValueError(f"`total_titles` must be at least 1, got {total_titles!r}.")
    if not 0.0 < threshold <= 1.0:
        raise ValueError(f"`threshold` must be within (0, 1], got {threshold!r}.")

    kept: list[str] = []
    still_stripping = True
    for token in tokenize(title):
        if still_stripping:
            if token.kind is TokenKind.BRACKETED:
                still_stripping = False
            elif table.count(token.text) / total_titles >= threshold:
                continue
            else:
                still_stripping = False
        kept.append(token.text)
    return "".join(kept).strip()


def clean_titles(titles: Sequence[str], threshold: float) -> list[str]:
    """Profile a batch once and clean every title against it, in order."""

    if not titles:
        return []
    table = build_frequency(titles)
    return [clean_title(title, table, len(titles), threshold) for title in titles]
