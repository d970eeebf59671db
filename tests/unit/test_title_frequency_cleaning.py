"""Unit tests for batch-wide title frequency profiling and prefix cleaning."""

from __future__ import annotations

import pytest

from bookmerge.titles import build_frequency, clean_title, clean_titles

_INTRO_BATCH = ["Chapter 1 [Intro]", "Chapter 2 [Intro]", "Chapter 3 [Intro]"]
_SERIES_BATCH = [
    "Series Name Chapter 1 Start",
    "Series Name Chapter 2 Middle",
    "Series Other Chapter 3 End",
    "Prologue",
]


def test_build_frequency_counts_plain_tokens_only() -> None:
    """Bracketed tokens should never contribute to frequencies."""

    table = build_frequency(_INTRO_BATCH)

    assert table.count("Chapter") == 3
    assert table.count("[Intro]") == 0
    assert table.count("missing") == 0
    assert len(table) == 1


def test_build_frequency_counts_every_occurrence() -> None:
    """A title repeating a word should contribute once per occurrence."""

    table = build_frequency(["Echo Echo 1", "Echo 2"])

    assert table.count("Echo") == 3


def test_build_frequency_is_case_sensitive_and_order_independent() -> None:
    """Only byte-identical tokens match, and title order should not matter."""

    forward = build_frequency(["Part A", "part B", "Part C"])
    backward = build_frequency(["Part C", "part B", "Part A"])

    assert dict(forward.counts) == dict(backward.counts)
    assert forward.count("Part") == 2
    assert forward.count("part") == 1


def test_frequency_table_is_read_only() -> None:
    """The table should reject mutation after construction."""

    table = build_frequency(_INTRO_BATCH)

    with pytest.raises(TypeError):
        table.counts["Chapter"] = 0  # type: ignore[index]


def test_clean_title_strips_shared_prefix_before_bracketed_token() -> None:
    """Boilerplate before a bracketed token should drop while the bracket survives."""

    table = build_frequency(_INTRO_BATCH)

    assert clean_title("Chapter 1 [Intro]", table, 3, 0.8) == "[Intro]"


def test_clean_title_keeps_token_below_threshold() -> None:
    """A token shared by fewer titles than the threshold should stay."""

    titles = ["Prologue", "Chapter 1", "Chapter 2"]
    table = build_frequency(titles)

    assert clean_title("Chapter 1", table, len(titles), 0.8) == "Chapter"


def test_clean_title_threshold_comparison_is_inclusive() -> None:
    """A ratio exactly equal to the threshold should be stripped."""

    titles = ["Part One", "Part Two", "Other Three", "Other Four"]
    table = build_frequency(titles)

    assert clean_title("Part One", table, len(titles), 0.5) == "One"
    assert clean_title("Part One", table, len(titles), 0.51) == "PartOne"


def test_clean_title_empty_title_returns_empty_string() -> None:
    """An empty title should clean to an empty string."""

    table = build_frequency([""])

    assert clean_title("", table, 1, 0.8) == ""


def test_clean_title_can_strip_everything() -> None:
    """A title made only of boilerplate should clean to an empty string."""

    titles = ["Chapter 1", "Chapter 2"]
    table = build_frequency(titles)

    assert clean_title("Chapter 1", table, len(titles), 0.8) == ""


def test_clean_title_leading_bracket_stops_stripping() -> None:
    """A bracketed first token should end stripping for every later token."""

    titles = ["[Note] Chapter 1", "[Note] Chapter 2"]
    table = build_frequency(titles)

    assert clean_title("[Note] Chapter 1", table, len(titles), 0.8) == "[Note]Chapter"


def test_clean_title_keeps_repeated_tail_after_first_kept_token() -> None:
    """High-frequency tokens after the first kept token should be preserved."""

    titles = ["Book Alpha Book", "Book Beta Book", "Book Gamma Book"]
    table = build_frequency(titles)

    assert clean_title("Book Alpha Book", table, len(titles), 0.8) == "AlphaBook"


def test_clean_title_preserves_internal_bracket_whitespace_and_trims_edges() -> None:
    """Bracketed spans keep inner spaces; the joined result has no outer whitespace."""

    titles = ["Intro [ Live Set ]", "Intro [Studio]"]
    table = build_frequency(titles)

    assert clean_title("Intro [ Live Set ]", table, len(titles), 1.0) == "[ Live Set ]"


@pytest.mark.parametrize(
    ("threshold", "expected"),
    [
        (0.25, ""),
        (0.5, "Start"),
        (0.75, "NameChapterStart"),
        (1.0, "SeriesNameChapterStart"),
    ],
)
def test_clean_title_follows_threshold(threshold: float, expected: str) -> None:
    """Each threshold should strip exactly the leading tokens at or above it."""

    table = build_frequency(_SERIES_BATCH)

    assert clean_title(_SERIES_BATCH[0], table, len(_SERIES_BATCH), threshold) == expected


def test_clean_title_strips_monotonically_less_as_threshold_rises() -> None:
    """Raising the threshold should only ever keep more of the title's tail."""

    table = build_frequency(_SERIES_BATCH)
    thresholds = [0.1, 0.25, 0.4, 0.5, 0.6, 0.75, 0.9, 1.0]

    for title in _SERIES_BATCH:
        results = [clean_title(title, table, len(_SERIES_BATCH), value) for value in thresholds]
        for lower, higher in zip(results, results[1:]):
            assert higher.endswith(lower)
            assert len(higher) >= len(lower)


@pytest.mark.parametrize("threshold", [0.01, 0.3, 0.8, 1.0])
def test_clean_title_never_drops_bracketed_tokens(threshold: float) -> None:
    """Bracketed tokens should survive every threshold."""

    titles = ["Vol [A] Vol", "Vol [B] Vol", "Vol [A]"]
    table = build_frequency(titles)

    for title in titles:
        cleaned = clean_title(title, table, len(titles), threshold)
        for bracket in ("[A]", "[B]"):
            if bracket in title:
                assert bracket in cleaned


@pytest.mark.parametrize("total_titles", [0, -1])
def test_clean_title_rejects_non_positive_total(total_titles: int) -> None:
    """A batch size below one should fail fast instead of dividing by zero."""

    table = build_frequency(["Chapter 1"])

    with pytest.raises(ValueError, match="`total_titles` must be at least 1"):
        clean_title("Chapter 1", table, total_titles, 0.8)


@pytest.mark.parametrize("threshold", [0.0, -0.2, 1.01, float("nan")])
def test_clean_title_rejects_out_of_range_threshold(threshold: float) -> None:
    """Thresholds outside (0, 1] should fail fast."""

    table = build_frequency(["Chapter 1"])

    with pytest.raises(ValueError, match="`threshold` must be within"):
        clean_title("Chapter 1", table, 1, threshold)


def test_clean_titles_cleans_a_batch_in_order() -> None:
    """Batch helper should profile once and clean every title in input order."""

    assert clean_titles(_INTRO_BATCH, 0.8) == ["[Intro]", "[Intro]", "[Intro]"]
    assert clean_titles(["Chapter 1 Dawn", "Chapter 2 Dusk"], 0.8) == ["Dawn", "Dusk"]


def test_clean_titles_accepts_empty_batch() -> None:
    """An empty batch should produce no titles."""

    assert clean_titles([], 0.8) == []
