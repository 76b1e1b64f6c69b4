"""
Corpus Reader

Line sources for training. Text is yielded one line at a time so the trainer
never needs the whole corpus in memory. Binary streams yield raw `bytes`
lines, leaving decoding to the trainer, so a single undecodable line is
skipped instead of aborting the whole read.

CSV corpora are loaded with pandas, taking one text column the same way the
training datasets are handled elsewhere: an explicit column if given,
otherwise the first column whose name mentions text, content or comment.

Several files form a corpus of documents: `iter_corpus` yields one line
source per file, so a file that fails half way only loses its own remaining
lines and nothing carries over from one file into the next.
"""

import logging
import os

import pandas as pd

module_logger = logging.getLogger(__name__)

TEXT_COLUMN_HINTS = ("text", "content", "comment")


class LineReader:
    """
    Iterator over the lines of a text or binary stream, without their line terminators.

    A read error raised by the stream propagates to the caller, but the
    reader stays usable: the next call reads from the stream again.
    """

    def __init__(self, stream):
        """
        Args:
            stream: An open file object, `sys.stdin`, `sys.stdin.buffer` or any iterable of lines.
        """
        self.lines = iter(stream)

    def __iter__(self):
        return self

    def __next__(self):
        line = next(self.lines)
        if isinstance(line, bytes):
            return line.rstrip(b"\r\n")
        return line.rstrip("\r\n")


def read_lines(stream):
    """
    Read the lines of a stream in the stream's own type (`str` or `bytes`).

    Returns:
        LineReader: Iterator over the stripped lines.
    """
    return LineReader(stream)


def read_text_file(file_path):
    """
    Yield the lines of a text file as raw bytes.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    with open(file_path, "rb") as f:
        yield from read_lines(f)


def select_text_column(df, column=None):
    """
    Pick the column holding the corpus text.

    Args:
        df (pandas.DataFrame): The loaded CSV.
        column (str, optional): Column to use. Must exist when given.

    Returns:
        The selected column label.

    Raises:
        KeyError: If `column` is not in the frame.
        ValueError: If the frame has no columns.
    """
    if column is not None:
        if column not in df.columns:
            raise KeyError(f"Column {column!r} not found in CSV")
        return column

    if len(df.columns) == 0:
        raise ValueError("CSV has no columns")

    text_columns = [col for col in df.columns
                    if any(hint in str(col).lower() for hint in TEXT_COLUMN_HINTS)]
    if text_columns:
        return text_columns[0]

    return df.columns[0]


def read_csv_column(file_path, column=None, logger=None):
    """
    Yield the lines of one text column of a CSV file.

    Args:
        file_path (str): Path to the CSV file.
        column (str, optional): Column name. Picked by `select_text_column` when omitted.
        logger (Logger, optional): Logger for diagnostics.

    Yields:
        str: One line per line of every non-null cell.
    """
    logger = logger or module_logger

    try:
        df = pd.read_csv(file_path, encoding="utf-8")
    except UnicodeDecodeError:
        logger.warning(f"CSV is not valid UTF-8, retrying as latin-1: {file_path}")
        df = pd.read_csv(file_path, encoding="latin-1")

    text_column = select_text_column(df, column)
    logger.info(f"Loading CSV corpus: {file_path}", extra={
        "metrics": {
            "file_path": file_path,
            "column": str(text_column),
            "rows": len(df)
        }
    })

    for cell in df[text_column].dropna():
        yield from str(cell).splitlines()


def read_corpus_file(file_path, csv_column=None, logger=None):
    """
    Line source for one corpus file, chosen by extension.

    `.csv` files are read with `read_csv_column`; anything else is read as
    plain text. Nothing is opened until the first line is requested.
    """
    logger = logger or module_logger

    if os.path.splitext(file_path)[1].lower() == ".csv":
        return read_csv_column(file_path, column=csv_column, logger=logger)

    logger.info(f"Loading text corpus: {file_path}")
    return read_text_file(file_path)


def iter_corpus(paths, csv_column=None, logger=None):
    """
    Yield one line source per corpus file, in order.

    Every path is checked before the first file is read. Each file is a
    separate document for `MarkovTrainer.train_documents`.

    Args:
        paths (list): Corpus file paths.
        csv_column (str, optional): Column to read from CSV files.
        logger (Logger, optional): Logger for diagnostics.

    Returns:
        iterator: Line sources, one per file.

    Raises:
        FileNotFoundError: If a path does not exist.
    """
    logger = logger or module_logger
    paths = list(paths)

    for file_path in paths:
        if not os.path.exists(file_path):
            logger.error(f"Corpus file not found: {file_path}")
            raise FileNotFoundError(f"Corpus file not found: {file_path}")

    return (read_corpus_file(file_path, csv_column=csv_column, logger=logger)
            for file_path in paths)
