import pytest
from babble.models.token import (
    BOUNDARY, Boundary, BoundaryConfig, Word, is_boundary, is_word
)


def test_word_equality_is_structural():
    assert Word("cat") == Word("cat")
    assert Word("cat") != Word("Cat")
    assert hash(Word("cat")) == hash(Word("cat"))


def test_boundaries_are_equal():
    assert Boundary() == BOUNDARY
    assert hash(Boundary()) == hash(BOUNDARY)


def test_word_never_equals_boundary_or_string():
    assert Word("cat") != BOUNDARY
    assert BOUNDARY != Word("cat")
    assert Word("cat") != "cat"


def test_word_rejects_empty_and_whitespace():
    with pytest.raises(ValueError, match="must not be empty"):
        Word("")

    with pytest.raises(ValueError, match="whitespace"):
        Word("two words")

    with pytest.raises(TypeError):
        Word(None)


def test_word_is_immutable():
    word = Word("cat")
    with pytest.raises(AttributeError):
        word.text = "dog"


def test_tokens_key_dictionaries():
    counts = {Word("a"): 1, BOUNDARY: 2}
    assert counts[Word("a")] == 1
    assert counts[Boundary()] == 2


def test_type_helpers():
    assert is_boundary(BOUNDARY)
    assert not is_boundary(Word("x"))
    assert is_word(Word("x"))
    assert not is_word(BOUNDARY)


def test_str_rendering():
    assert str(Word("cat")) == "cat"
    assert str(BOUNDARY) == ""


class TestBoundaryConfig:
    """Resolving boundary configurations from user input."""

    def test_from_member(self):
        config = BoundaryConfig.SENTENCE_ENDINGS
        assert BoundaryConfig.from_value(config) is config

    @pytest.mark.parametrize("value, expected", [
        ("line-endings", BoundaryConfig.LINE_ENDINGS),
        ("LINE_ENDINGS", BoundaryConfig.LINE_ENDINGS),
        ("sentence_endings", BoundaryConfig.SENTENCE_ENDINGS),
        (" Sentence-Endings ", BoundaryConfig.SENTENCE_ENDINGS),
    ])
    def test_from_string(self, value, expected):
        assert BoundaryConfig.from_value(value) is expected

    def test_unknown_value(self):
        with pytest.raises(ValueError, match="Unknown boundary configuration"):
            BoundaryConfig.from_value("paragraphs")

        with pytest.raises(ValueError):
            BoundaryConfig.from_value(None)
