import pytest
from babble.models.token import BOUNDARY, BoundaryConfig, Word
from babble.models.tokenizer import (
    extract_sentence_boundaries,
    render,
    split_leading_punctuation,
    split_trailing_punctuation,
    tokenize,
)

LINES = BoundaryConfig.LINE_ENDINGS
SENTENCES = BoundaryConfig.SENTENCE_ENDINGS


def words(*texts):
    return [Word(text) for text in texts]


@pytest.mark.parametrize("config", [LINES, SENTENCES])
def test_plain_words_split_on_whitespace(config):
    line = "I see a little  silhouetto\tof a man"
    assert tokenize(line, config) == words(
        "I", "see", "a", "little", "silhouetto", "of", "a", "man")


@pytest.mark.parametrize("config", [LINES, SENTENCES])
def test_empty_and_blank_lines(config):
    assert tokenize("", config) == []
    assert tokenize("   \t  ", config) == []


def test_single_period_is_just_a_boundary():
    assert tokenize(".", SENTENCES) == [BOUNDARY]


def test_single_period_under_line_endings_is_a_word():
    assert tokenize(".", LINES) == words(".")


def test_parentheses_split_off():
    assert tokenize("(Paren)", LINES) == words("(", "Paren", ")")
    assert tokenize("(Paren)", SENTENCES) == words("(", "Paren", ")")


def test_sentence_endings_become_boundaries():
    assert tokenize("Is this the real life?", SENTENCES) == (
        words("Is", "this", "the", "real", "life") + [BOUNDARY])
    assert tokenize("Stop! Go.", SENTENCES) == [
        Word("Stop"), BOUNDARY, Word("Go"), BOUNDARY]


def test_sentence_endings_stay_words_under_line_endings():
    assert tokenize("Stop! Go.", LINES) == words("Stop", "!", "Go", ".")


def test_comma_and_quotes():
    assert tokenize('Scaramouche, "will" you', LINES) == words(
        "Scaramouche", ",", '"', "will", '"', "you")


def test_lone_punctuation_never_leaves_empty_words():
    assert tokenize('" \' ( ) { } ,', LINES) == words(
        '"', "'", "(", ")", "{", "}", ",")


def test_only_one_character_split_per_pass():
    assert tokenize("((a))", LINES) == words("(", "(a)", ")")
    assert tokenize("wait...", SENTENCES) == [
        Word("wait."), Word("."), BOUNDARY]


def test_punctuation_after_sentence_end():
    assert tokenize("(Galileo.)", SENTENCES) == words("(", "Galileo.", ")")


def test_tokenize_accepts_string_config():
    assert tokenize("Go.", "sentence-endings") == [Word("Go"), BOUNDARY]


def test_tokenize_is_repeatable():
    line = "He's just a poor boy, from a poor family."
    assert tokenize(line, SENTENCES) == tokenize(line, SENTENCES)


def test_passes_build_new_lists():
    tokens = words("a.", "b.", "c")
    result = extract_sentence_boundaries(tokens)

    assert tokens == words("a.", "b.", "c")
    assert result == [Word("a"), BOUNDARY, Word("b"), BOUNDARY, Word("c")]


def test_passes_leave_boundaries_alone():
    tokens = [BOUNDARY, Word("x)"), Word("(y")]
    assert split_trailing_punctuation(tokens) == [
        BOUNDARY, Word("x"), Word(")"), Word("(y")]
    assert split_leading_punctuation(tokens) == [
        BOUNDARY, Word("x)"), Word("("), Word("y")]


def test_render_skips_boundaries():
    tokens = [BOUNDARY, Word("the"), Word("end"), BOUNDARY]
    assert render(tokens) == "the end"
    assert render(["plain", "strings"]) == "plain strings"
    assert render([]) == ""
