"""
Token Types

Tokens are the atomic units the Markov chain is trained on and generates.
A token is either a `Word`, carrying a fragment of text, or a `Boundary`,
a payload-free marker for the start or end of a chain segment.

Boundaries are a distinct type rather than a reserved string, so no text in
the corpus can ever be mistaken for one.
"""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Word:
    """
    A word-like fragment of text.

    Attributes:
        text (str): Non-empty text without whitespace.
    """

    text: str

    def __post_init__(self):
        if not isinstance(self.text, str):
            raise TypeError(
                f"Word text must be a string, got {type(self.text).__name__}")
        if not self.text:
            raise ValueError("Word text must not be empty")
        if any(char.isspace() for char in self.text):
            raise ValueError(
                f"Word text must not contain whitespace: {self.text!r}")

    def __str__(self):
        return self.text


@dataclass(frozen=True)
class Boundary:
    """Marks a segment boundary (line or sentence end). Never rendered."""

    def __str__(self):
        return ""


BOUNDARY = Boundary()


def is_boundary(token):
    return isinstance(token, Boundary)


def is_word(token):
    return isinstance(token, Word)


class BoundaryConfig(Enum):
    """
    Selects how token sequences are split into segments.

    LINE_ENDINGS wraps every input line with boundaries, which suits corpora
    such as play transcripts where each line stands alone. SENTENCE_ENDINGS
    places boundaries at `.`, `!` and `?` and carries the chain across line
    breaks.
    """

    LINE_ENDINGS = "line-endings"
    SENTENCE_ENDINGS = "sentence-endings"

    @classmethod
    def from_value(cls, value):
        """
        Resolve a BoundaryConfig from an enum member, its value or its name.

        Args:
            value: A BoundaryConfig, or a string such as "line-endings",
                   "LINE_ENDINGS" or "sentence_endings".

        Returns:
            BoundaryConfig: The matching member.

        Raises:
            ValueError: If the value does not name a boundary configuration.
        """
        if isinstance(value, cls):
            return value

        if isinstance(value, str):
            normalized = value.strip().lower().replace("_", "-")
            for member in cls:
                if member.value == normalized:
                    return member

        choices = ", ".join(member.value for member in cls)
        raise ValueError(
            f"Unknown boundary configuration {value!r} (expected one of: {choices})")
