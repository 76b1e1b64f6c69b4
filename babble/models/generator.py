"""
Markov Generator

Walks a trained TransitionTable to produce new text one word at a time.

Each step looks up the outgoing counts of the current token and draws the
next token with probability proportional to its count. Boundaries are used
for routing only and are never returned to the caller: reaching one ends the
current segment.

Generation starts from the Boundary's outgoing distribution, so output
begins the way lines or sentences in the corpus begin. Only when the table
has no Boundary source (a hand-built table) is the first token picked
uniformly from the known sources, and emitted if it is a Word.

Usage:
    >>> table = train(["the cat sat", "the dog sat"])
    >>> generator = MarkovGenerator(table, seed=7)
    >>> generator.generate_text(max_tokens=10)  # "the cat sat" or "the dog sat"
"""

import logging

import numpy as np

from babble.models.token import BOUNDARY, BoundaryConfig, is_boundary
from babble.models.tokenizer import render

module_logger = logging.getLogger(__name__)

STOP_BOUNDARY = "boundary"
STOP_DEAD_END = "dead_end"
STOP_EMPTY = "empty"


class MarkovGenerator:
    """
    Pull-based text generator over a TransitionTable.

    `produce_next()` returns the next word, or None when the current segment
    ends. After a None the generator is back at its start state, so calling it
    again begins a new segment.

    Iterating the generator yields the words of one fresh segment. Each
    `iter()` call starts a new one; `produce_next()` is the restartable
    interface.

        >>> words = list(itertools.islice(generator, 5))
    """

    def __init__(
        self,
        transitions,
        boundary_config=BoundaryConfig.LINE_ENDINGS,
        seed=None,
        rng=None,
        logger=None
    ):
        """
        Args:
            transitions (TransitionTable): The trained table. It is read, never modified.
            boundary_config (BoundaryConfig or str): The policy the table was trained with;
                                                     decides how segments are joined.
            seed (int, optional): Seed for this generator's random source.
            rng (numpy.random.Generator, optional): Random source to own instead of seeding one.
            logger (Logger, optional): Logger for diagnostics.
        """
        self.transitions = transitions
        self.boundary_config = BoundaryConfig.from_value(boundary_config)
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.logger = logger or module_logger

        self.last_token = None
        self.stop_reason = None

    def reset(self):
        """Return to the start state."""
        self.last_token = None
        self.stop_reason = None

    def produce_next(self):
        """
        Produce the next word of the current segment.

        Returns:
            str or None: The next word, or None when the segment ends at a
                         boundary, a dead end or an empty table (see `stop_reason`).
        """
        if self.last_token is None:
            word = self._start()
            if word is not None or self.last_token is None:
                return word

        next_token = self.pick_next_token(self.last_token)
        if next_token is None:
            return self._stop(STOP_DEAD_END)
        if is_boundary(next_token):
            return self._stop(STOP_BOUNDARY)

        self.last_token = next_token
        return next_token.text

    def pick_next_token(self, last_token):
        """
        Draw the token that follows `last_token`, weighted by transition count.

        Args:
            last_token: The current source token.

        Returns:
            Token or None: The drawn token, or None when `last_token` has no
                           usable outgoing transitions.
        """
        next_counts = self.transitions.next_tokens(last_token)
        if next_counts is None:
            return None

        tokens = list(next_counts.keys())
        weights = np.fromiter(next_counts.values(), dtype=np.float64,
                              count=len(tokens))
        total = weights.sum()

        if not tokens or total <= 0 or (weights < 0).any():
            self.logger.warning("Failed to build weighted distribution", extra={
                "metrics": {
                    "last_token": str(last_token),
                    "destinations": len(tokens),
                    "total_weight": float(total)
                }
            })
            return None

        index = self.rng.choice(len(tokens), p=weights / total)
        return tokens[index]

    def generate(self, max_tokens, segments=1):
        """
        Generate up to `max_tokens` words.

        Args:
            max_tokens (int): Upper bound on the number of words.
            segments (int): Number of boundary-terminated segments to produce
                            before stopping. Dead ends always stop.

        Returns:
            list: The generated words.

        Raises:
            ValueError: If `max_tokens` or `segments` is not positive.
        """
        return [word for segment in self._segments(max_tokens, segments)
                for word in segment]

    def generate_text(self, max_tokens, segments=1):
        """
        Generate text, joining segments by the boundary configuration.

        Segments end on a newline under LINE_ENDINGS and on a space under
        SENTENCE_ENDINGS.

        Returns:
            str: The rendered text, empty when nothing was generated.
        """
        separator = "\n" if self.boundary_config is BoundaryConfig.LINE_ENDINGS else " "
        rendered = [render(segment)
                    for segment in self._segments(max_tokens, segments)]
        return separator.join(part for part in rendered if part)

    def _segments(self, max_tokens, segments):
        if max_tokens <= 0:
            raise ValueError("max_tokens must be a positive integer")
        if segments <= 0:
            raise ValueError("segments must be a positive integer")

        self.reset()
        produced = []
        current = []
        remaining = max_tokens

        while remaining > 0:
            word = self.produce_next()
            if word is not None:
                current.append(word)
                remaining -= 1
                continue

            produced.append(current)
            current = []
            if self.stop_reason != STOP_BOUNDARY or len(produced) >= segments:
                break

        if current:
            produced.append(current)

        self.logger.info("Text generation completed", extra={
            "metrics": {
                "words_generated": max_tokens - remaining,
                "segments": len(produced),
                "max_tokens": max_tokens,
                "stop_reason": self.stop_reason if remaining > 0 else "max_tokens"
            }
        })
        return produced

    def _start(self):
        if self.transitions.is_empty():
            self.logger.warning("Text generation requested from an empty model")
            return self._stop(STOP_EMPTY)

        if BOUNDARY in self.transitions:
            self.last_token = BOUNDARY
            return None

        sources = list(self.transitions.last_tokens())
        self.last_token = sources[self.rng.integers(len(sources))]
        return self.last_token.text

    def _stop(self, reason):
        self.stop_reason = reason
        self.last_token = None
        return None

    def __iter__(self):
        self.reset()
        while True:
            word = self.produce_next()
            if word is None:
                return
            yield word
