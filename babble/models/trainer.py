"""
Markov Chain Trainer

Streams lines of a corpus through the tokenizer and counts the token
transitions into a TransitionTable.

Boundary handling depends on the BoundaryConfig:

- LINE_ENDINGS: every line is wrapped as [BOUNDARY, tokens..., BOUNDARY], so
  nothing links one line to the next.
- SENTENCE_ENDINGS: the last token of the previous line is prepended to the
  next one, so a sentence broken over two lines keeps its adjacency.
  Boundaries only come from sentence punctuation found by the tokenizer.
  The carry never crosses from one document into the next.

A (BOUNDARY, BOUNDARY) pair is never counted. Blank lines and back-to-back
sentence ends would otherwise fill the boundary's outgoing distribution with
self-loops.

Example:
    >>> table = train(["start", "middle end."], BoundaryConfig.SENTENCE_ENDINGS)
    >>> table.count(Word("start"), Word("middle"))
    1
"""

import logging
import time

from babble.exceptions import CorpusReadError
from babble.models.token import BOUNDARY, BoundaryConfig, is_boundary
from babble.models.tokenizer import tokenize
from babble.models.transitions import TransitionTable

module_logger = logging.getLogger(__name__)


def train_with_tokens(tokens, transitions):
    """
    Count every adjacent pair in a token list into `transitions`.

    Args:
        tokens (list): Tokens in corpus order.
        transitions (TransitionTable): Table to update in place.

    Returns:
        int: Number of transitions counted.
    """
    counted = 0
    for last_token, next_token in zip(tokens, tokens[1:]):
        if is_boundary(last_token) and is_boundary(next_token):
            continue
        transitions.count_transition(last_token, next_token)
        counted += 1
    return counted


class TrainingStats:
    """Running totals for one trainer."""

    def __init__(self):
        self.lines_read = 0
        self.lines_skipped = 0
        self.tokens_seen = 0
        self.transitions_counted = 0
        self.elapsed_seconds = 0.0

    def as_metrics(self):
        return {
            "lines_read": self.lines_read,
            "lines_skipped": self.lines_skipped,
            "tokens_seen": self.tokens_seen,
            "transitions_counted": self.transitions_counted,
            "elapsed_seconds": round(self.elapsed_seconds, 4),
        }


class MarkovTrainer:
    """
    Trains a TransitionTable from a stream of lines.

    The trainer keeps the carried token between calls to `train_lines`, so
    one stream split into several sources trains as if it were read in one
    go. `train_documents` starts every source afresh instead.
    """

    def __init__(
        self,
        boundary_config=BoundaryConfig.LINE_ENDINGS,
        transitions=None,
        logger=None,
        resource_monitor=None,
        encoding="utf-8",
        progress_interval=10000,
        max_consecutive_read_errors=10
    ):
        """
        Args:
            boundary_config (BoundaryConfig or str): Boundary policy for tokenizing and wrapping lines.
            transitions (TransitionTable, optional): Table to extend. A new one is created if omitted.
            logger (Logger, optional): Logger for diagnostics. Defaults to this module's logger.
            resource_monitor (ResourceMonitor, optional): Receives progress logs while training.
            encoding (str): Encoding used to decode `bytes` lines.
            progress_interval (int): Lines between progress logs when a resource monitor is attached.
            max_consecutive_read_errors (int): Consecutive failed reads tolerated before giving up.
        """
        self.boundary_config = BoundaryConfig.from_value(boundary_config)
        self.transitions = transitions if transitions is not None else TransitionTable()
        self.logger = logger or module_logger
        self.resource_monitor = resource_monitor
        self.encoding = encoding
        self.progress_interval = progress_interval
        self.max_consecutive_read_errors = max_consecutive_read_errors

        self.stats = TrainingStats()
        self.last_token = BOUNDARY

    def line_tokens(self, line):
        """
        Build the token sequence to count for one line.

        Under SENTENCE_ENDINGS this also advances the carried token.

        Args:
            line (str): A decoded line of text.

        Returns:
            list: Tokens, including the boundaries or carried token that wrap the line.
        """
        tokens = tokenize(line, self.boundary_config)

        if self.boundary_config is BoundaryConfig.LINE_ENDINGS:
            return [BOUNDARY] + tokens + [BOUNDARY]

        sequence = [self.last_token] + tokens
        if tokens:
            self.last_token = tokens[-1]
        return sequence

    def train_line(self, line):
        """
        Count the transitions of a single line.

        Args:
            line (str or bytes): The line. `bytes` are decoded with the trainer's encoding.

        Returns:
            int: Number of transitions counted, 0 for a skipped line.
        """
        text = self._decode(line)
        if text is None:
            self.stats.lines_skipped += 1
            return 0

        sequence = self.line_tokens(text)
        counted = train_with_tokens(sequence, self.transitions)

        self.stats.lines_read += 1
        self.stats.tokens_seen += sum(1 for token in sequence[1:]
                                      if not is_boundary(token))
        self.stats.transitions_counted += counted
        return counted

    def train_lines(self, line_source):
        """
        Train on every line of a source.

        The carried token is kept, so a source may continue where the
        previous call to `train_lines` stopped.

        Args:
            line_source (iterable): Lines as `str` or `bytes`. Read errors raised by the
                                    iterator are logged and the line is skipped.

        Returns:
            TransitionTable: The updated table.

        Raises:
            CorpusReadError: If reading fails more than `max_consecutive_read_errors` times in a row.
        """
        return self._train([line_source], separate_documents=False)

    def train_documents(self, documents):
        """
        Train on several line sources, each one a separate document.

        The carried token goes back to BOUNDARY at the start of every
        document. A read error that ends a document early moves training on
        to the next one, and consecutive read errors are counted across
        documents.

        Args:
            documents (iterable): Line sources, for example from `iter_corpus`.

        Returns:
            TransitionTable: The updated table.

        Raises:
            CorpusReadError: If reading fails more than `max_consecutive_read_errors` times in a row.
        """
        return self._train(documents, separate_documents=True)

    def _train(self, sources, separate_documents):
        start_time = time.time()
        if self.resource_monitor:
            self.resource_monitor.start("corpus_training")

        try:
            consecutive_errors = 0
            for line_source in sources:
                if separate_documents:
                    self.last_token = BOUNDARY
                consecutive_errors = self._consume(iter(line_source), consecutive_errors)
        finally:
            self.stats.elapsed_seconds += time.time() - start_time
            if self.resource_monitor:
                self.resource_monitor.stop()

        self.logger.info("Training completed", extra={
            "metrics": dict(
                self.stats.as_metrics(),
                boundary_config=self.boundary_config.value,
                known_sources=len(self.transitions),
                unique_transitions=self.transitions.unique_transitions()
            )
        })
        return self.transitions

    def _consume(self, lines, consecutive_errors=0):
        while True:
            try:
                line = next(lines)
            except StopIteration:
                return consecutive_errors
            except (OSError, UnicodeDecodeError) as e:
                consecutive_errors += 1
                self.stats.lines_skipped += 1
                self.logger.warning(f"Error reading line: {e}", extra={
                    "metrics": {
                        "line_number": self._line_number(),
                        "consecutive_errors": consecutive_errors
                    }
                })
                if consecutive_errors > self.max_consecutive_read_errors:
                    error_msg = "Corpus could not be read: too many consecutive read errors"
                    self.logger.error(error_msg, extra={
                        "metrics": {"consecutive_errors": consecutive_errors}
                    })
                    raise CorpusReadError(error_msg) from e
                continue

            consecutive_errors = 0
            self.train_line(line)

            if (self.resource_monitor and self.progress_interval
                    and self._line_number() % self.progress_interval == 0):
                self.resource_monitor.log_progress(
                    "Training progress",
                    operation="corpus_training",
                    extra_metrics=self.stats.as_metrics()
                )

    def _decode(self, line):
        if isinstance(line, str):
            return line
        try:
            return bytes(line).decode(self.encoding)
        except UnicodeDecodeError as e:
            self.logger.warning(f"Skipping undecodable line: {e}", extra={
                "metrics": {
                    "line_number": self._line_number() + 1,
                    "encoding": self.encoding
                }
            })
            return None

    def _line_number(self):
        return self.stats.lines_read + self.stats.lines_skipped


def train(
    line_source,
    boundary_config=BoundaryConfig.LINE_ENDINGS,
    transitions=None,
    logger=None,
    resource_monitor=None,
    **trainer_options
):
    """
    Train a TransitionTable from a source of lines.

    Args:
        line_source (iterable): Lines of the corpus (`str` or `bytes`).
        boundary_config (BoundaryConfig or str): Boundary policy.
        transitions (TransitionTable, optional): Existing table to extend.
        logger (Logger, optional): Logger for diagnostics.
        resource_monitor (ResourceMonitor, optional): Progress and resource logging.
        **trainer_options: Passed through to MarkovTrainer (encoding,
                           progress_interval, max_consecutive_read_errors).

    Returns:
        TransitionTable: The trained table.
    """
    trainer = MarkovTrainer(
        boundary_config=boundary_config,
        transitions=transitions,
        logger=logger,
        resource_monitor=resource_monitor,
        **trainer_options
    )
    return trainer.train_lines(line_source)


def train_documents(
    documents,
    boundary_config=BoundaryConfig.LINE_ENDINGS,
    transitions=None,
    logger=None,
    resource_monitor=None,
    **trainer_options
):
    """
    Train a TransitionTable from several documents, each a source of lines.

    Nothing is carried from the end of one document into the next.

    Returns:
        TransitionTable: The trained table.
    """
    trainer = MarkovTrainer(
        boundary_config=boundary_config,
        transitions=transitions,
        logger=logger,
        resource_monitor=resource_monitor,
        **trainer_options
    )
    return trainer.train_documents(documents)
