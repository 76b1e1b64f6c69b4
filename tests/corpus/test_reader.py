import io
import pandas as pd
import pytest
from unittest.mock import MagicMock
from babble.corpus import reader
from babble.corpus.reader import (
    iter_corpus,
    read_csv_column,
    read_lines,
    read_text_file,
    select_text_column,
)
from babble.models.token import BOUNDARY, Word
from babble.models.trainer import train_documents


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing"""
    return MagicMock()


class FlakyStream:
    """Stream stand-in that raises the Exception items and keeps going afterwards."""

    def __init__(self, items):
        self.items = list(items)

    def __iter__(self):
        return self

    def __next__(self):
        if not self.items:
            raise StopIteration
        item = self.items.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def test_read_lines_strips_terminators():
    stream = io.StringIO("first\nsecond\r\n\nlast")
    assert list(read_lines(stream)) == ["first", "second", "", "last"]


def test_read_lines_keeps_bytes():
    stream = io.BytesIO(b"caf\xc3\xa9\r\n\xff broken\n")
    assert list(read_lines(stream)) == [b"caf\xc3\xa9", b"\xff broken"]


def test_read_lines_accepts_plain_iterables():
    assert list(read_lines(["a\n", "b"])) == ["a", "b"]


def test_read_lines_survives_stream_errors():
    stream = FlakyStream([b"one\n", OSError("flaky"), b"two\n"])
    lines = read_lines(stream)

    assert next(lines) == b"one"
    with pytest.raises(OSError, match="flaky"):
        next(lines)
    assert list(lines) == [b"two"]


def test_read_text_file(tmp_path):
    corpus = tmp_path / "corpus.txt"
    corpus.write_bytes(b"line one\nline two\n")

    assert list(read_text_file(str(corpus))) == [b"line one", b"line two"]


class TestSelectTextColumn:

    def test_explicit_column(self):
        df = pd.DataFrame({"id": [1], "body": ["hi"]})
        assert select_text_column(df, "body") == "body"

    def test_missing_explicit_column(self):
        df = pd.DataFrame({"id": [1]})
        with pytest.raises(KeyError, match="body"):
            select_text_column(df, "body")

    def test_prefers_text_like_columns(self):
        df = pd.DataFrame({"id": [1], "sentiment": ["pos"], "Comment_Text": ["hi"]})
        assert select_text_column(df) == "Comment_Text"

    def test_falls_back_to_first_column(self):
        df = pd.DataFrame({"quote": ["hi"], "author": ["me"]})
        assert select_text_column(df) == "quote"

    def test_no_columns(self):
        with pytest.raises(ValueError, match="no columns"):
            select_text_column(pd.DataFrame())


def test_read_csv_column(mocker, mock_logger):
    mock_csv_data = {"id": [1, 2, 3], "text": ["Hello world", None, "two\nlines"]}
    mocker.patch("pandas.read_csv", return_value=pd.DataFrame(mock_csv_data))

    lines = list(read_csv_column("dummy_path.csv", logger=mock_logger))

    assert lines == ["Hello world", "two", "lines"]
    mock_logger.info.assert_called_once()


def test_read_csv_column_falls_back_to_latin1(mocker, mock_logger):
    read_csv = mocker.patch("pandas.read_csv", side_effect=[
        UnicodeDecodeError("utf-8", b"\xe9", 0, 1, "invalid"),
        pd.DataFrame({"content": ["caf\xe9"]}),
    ])

    assert list(read_csv_column("dummy_path.csv", logger=mock_logger)) == ["caf\xe9"]
    assert read_csv.call_args.kwargs["encoding"] == "latin-1"
    mock_logger.warning.assert_called_once()


def test_read_real_csv(tmp_path):
    corpus = tmp_path / "quotes.csv"
    corpus.write_text("author,quote\nme,\"Hello, world.\"\nyou,Bye now\n", encoding="utf-8")

    assert list(read_csv_column(str(corpus), column="quote")) == ["Hello, world.", "Bye now"]


def test_iter_corpus_yields_one_source_per_file(tmp_path, mock_logger):
    text_file = tmp_path / "a.txt"
    text_file.write_bytes(b"from text\n")
    csv_file = tmp_path / "b.CSV"
    csv_file.write_text("text\nfrom csv\n", encoding="utf-8")

    documents = [list(lines) for lines in
                 iter_corpus([str(text_file), str(csv_file)], logger=mock_logger)]

    assert documents == [[b"from text"], ["from csv"]]


def test_iter_corpus_checks_paths_up_front(tmp_path, mock_logger):
    text_file = tmp_path / "a.txt"
    text_file.write_bytes(b"fine\n")

    with pytest.raises(FileNotFoundError, match="missing.txt"):
        iter_corpus([str(text_file), str(tmp_path / "missing.txt")], logger=mock_logger)

    mock_logger.error.assert_called_once()


def test_unreadable_file_does_not_lose_later_files(mocker, tmp_path, mock_logger):
    first = tmp_path / "a.txt"
    second = tmp_path / "b.txt"
    first.write_bytes(b"alpha\n")
    second.write_bytes(b"beta\n")
    real_read_text_file = reader.read_text_file

    def broken_first_file(file_path):
        if file_path == str(first):
            yield b"alpha"
            raise OSError("bad sector")
        yield from real_read_text_file(file_path)

    mocker.patch.object(reader, "read_text_file", side_effect=broken_first_file)

    table = train_documents(iter_corpus([str(first), str(second)], logger=mock_logger),
                            logger=mock_logger)

    assert table.count(BOUNDARY, Word("alpha")) == 1
    assert table.count(BOUNDARY, Word("beta")) == 1
