"""Chapter title tokenization.

Responsibilities:
- Standardize regional and alternate bracket glyphs to `[`/`]`.
- Split a raw title into ordered bracketed and plain tokens.

Digits, whitespace, hyphens, and colons outside brackets act as separators
and are never emitted, so joining tokens does not reproduce the input.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import re


_BRACKET_TRANSLATION = str.maketrans(
    {
        "（": "[",
        "）": "]",
        "(": "[",
        ")": "]",
        "【": "[",
        "】": "]",
    }
)

_TOKEN_PATTERN = re.compile(r"(\[.*?\])|([^0-9\s\-:：\[\]]+)")


class TokenKind(str, Enum):
    """Token classification for parsed title segments."""

    BRACKETED = "bracketed"
    PLAIN = "plain"


@dataclass(frozen=True, slots=True)
class TitleToken:
    """One parsed unit of a chapter title.

    Attributes:
        kind: Whether the token is a bracketed span or a plain text run.
        text: Exact matched substring, delimiters included for bracketed spans.
    """

    kind: TokenKind
    text: str

    @property
    def is_bracketed(self) -> bool:
        """Return whether this token is a bracketed span."""

        return self.kind is TokenKind.BRACKETED


def standardize_brackets(text: str) -> str:
    """Replace alternate bracket glyphs with ASCII square brackets."""

    return text.translate(_BRACKET_TRANSLATION)


def tokenize(title: str) -> list[TitleToken]:
    """Split a title into ordered bracketed and plain tokens.

    A bracketed span is preferred over a plain run at every scan position.
    Unbalanced bracket characters match neither alternative and are skipped.
    """

    tokens: list[TitleToken] = []
    for match in _TOKEN_PATTERN.finditer(standardize_brackets(title)):
        bracketed, plain = match.groups()
        if bracketed is not None:
            tokens.append(TitleToken(kind=TokenKind.BRACKETED, text=bracketed))
        else:
            tokens.append(TitleToken(kind=TokenKind.PLAIN, text=plain))
    return tokens
