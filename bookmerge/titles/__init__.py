"""Chapter title normalization.

This package turns filename-derived chapter labels into display titles by
stripping boilerplate shared across the whole batch.
"""

from .frequency import FrequencyTable, build_frequency, clean_title, clean_titles
from .tokenizer import TitleToken, TokenKind, standardize_brackets, tokenize

__all__ = [
    "FrequencyTable",
    "TitleToken",
    "TokenKind",
    "build_frequency",
    "clean_title",
    "clean_titles",
    "standardize_brackets",
    "tokenize",
]
