"""
Tokenizer

Turns one line of raw text into a list of tokens in four passes:

1. Split on runs of whitespace.
2. Under sentence-ending boundaries only, replace a trailing `.`, `!` or `?`
   with a Boundary token.
3. Split one trailing punctuation character off into its own Word.
4. Split one leading punctuation character off into its own Word.

Each pass reads the previous list and builds a new one, so splitting a token
never disturbs the position of the tokens after it.

Example:
    >>> tokenize("(Paren) end.", BoundaryConfig.SENTENCE_ENDINGS)
    [Word(text='('), Word(text='Paren'), Word(text=')'), Word(text='end'), Boundary()]
"""

from babble.models.token import BOUNDARY, BoundaryConfig, Word, is_word

SENTENCE_ENDINGS = frozenset(".!?")
TRAILING_PUNCTUATION = frozenset(".!?,\"'})")
LEADING_PUNCTUATION = frozenset("\"'{(")


def tokenize(line, config=BoundaryConfig.LINE_ENDINGS):
    """
    Tokenize a single line of text.

    Args:
        line (str): The raw line. Line terminators are treated as whitespace.
        config (BoundaryConfig): Boundary policy. Only SENTENCE_ENDINGS turns
                                 sentence punctuation into Boundary tokens.

    Returns:
        list: Word and Boundary tokens in reading order. Blank lines give an
              empty list.
    """
    config = BoundaryConfig.from_value(config)

    tokens = split_whitespace(line)
    if config is BoundaryConfig.SENTENCE_ENDINGS:
        tokens = extract_sentence_boundaries(tokens)
    tokens = split_trailing_punctuation(tokens)
    tokens = split_leading_punctuation(tokens)
    return tokens


def split_whitespace(line):
    return [Word(part) for part in line.split()]


def extract_sentence_boundaries(tokens):
    """Replace a sentence-ending character at the end of a Word with BOUNDARY."""
    output = []
    for token in tokens:
        if is_word(token) and token.text[-1] in SENTENCE_ENDINGS:
            remainder = token.text[:-1]
            if remainder:
                output.append(Word(remainder))
            output.append(BOUNDARY)
        else:
            output.append(token)
    return output


def split_trailing_punctuation(tokens):
    output = []
    for token in tokens:
        if is_word(token) and token.text[-1] in TRAILING_PUNCTUATION:
            remainder = token.text[:-1]
            if remainder:
                output.append(Word(remainder))
            output.append(Word(token.text[-1]))
        else:
            output.append(token)
    return output


def split_leading_punctuation(tokens):
    output = []
    for token in tokens:
        if is_word(token) and token.text[0] in LEADING_PUNCTUATION:
            output.append(Word(token.text[0]))
            remainder = token.text[1:]
            if remainder:
                output.append(Word(remainder))
        else:
            output.append(token)
    return output


def render(tokens):
    """
    Join the text of Word tokens with single spaces, dropping boundaries.

    Args:
        tokens (iterable): Tokens or plain strings.

    Returns:
        str: The rendered text.
    """
    parts = []
    for token in tokens:
        if isinstance(token, str):
            parts.append(token)
        elif is_word(token):
            parts.append(token.text)
    return " ".join(parts)
