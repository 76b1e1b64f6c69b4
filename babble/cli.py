#!/usr/bin/env python3
"""
Markov Babble command line

Trains a first-order Markov chain on a corpus read from files or stdin and
prints generated text to stdout. Logs go to stderr and, optionally, a JSON
log file.

Usage:
    babble corpus.txt --max-tokens 50 --boundaries sentence-endings
    cat play.txt | babble -m 30 -s 3
"""

import argparse
import sys

from babble.corpus.reader import iter_corpus, read_lines
from babble.exceptions import BabbleError, ConfigError
from babble.models.generator import MarkovGenerator
from babble.models.token import BoundaryConfig
from babble.models.trainer import train, train_documents
from babble.utils.config import load_config
from babble.utils.loggers.json_logger import get_logger, log_json
from babble.utils.system_monitoring import ResourceMonitor


def positive_int(value):
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def build_parser():
    parser = argparse.ArgumentParser(
        prog="babble",
        description="Train a Markov chain on a corpus and generate text from it")
    parser.add_argument("files", nargs="*",
                        help="Corpus files (.txt or .csv). Reads stdin when omitted")
    parser.add_argument("-m", "--max-tokens", type=positive_int,
                        help="Number of tokens to generate (default: 100)")
    parser.add_argument("-b", "--boundaries",
                        choices=[config.value for config in BoundaryConfig],
                        help="Boundary configuration for training (default: line-endings)")
    parser.add_argument("-s", "--segments", type=positive_int,
                        help="Number of lines or sentences to generate (default: 1)")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible output")
    parser.add_argument("--env", choices=["development", "test", "production"],
                        default="development", help="Environment (default: development)")
    parser.add_argument("--config", help="Path to a YAML configuration file")
    parser.add_argument("--csv-column", help="Column to read from CSV corpora")
    parser.add_argument("--log-file", help="Write JSON logs to this file ('auto' for logs/)")
    parser.add_argument("--monitor", action="store_true",
                        help="Log memory and CPU usage while training")
    return parser


def generation_count(generation, key):
    """Read a positive integer generation setting from configuration."""
    try:
        return positive_int(generation[key])
    except (TypeError, ValueError, argparse.ArgumentTypeError) as e:
        raise ConfigError(f"Invalid generation.{key} in configuration: {e}") from e


def resolve_settings(args, config):
    """
    Combine command line arguments with configuration values.

    Returns:
        dict: Effective settings, command line taking precedence.
    """
    generation = config["generation"]
    return {
        "max_tokens": args.max_tokens or generation_count(generation, "max_tokens"),
        "boundaries": BoundaryConfig.from_value(args.boundaries or generation["boundaries"]),
        "segments": args.segments or generation_count(generation, "segments"),
        "seed": args.seed if args.seed is not None else generation["seed"],
        "monitor": args.monitor or config["monitoring"]["enabled"],
        "log_file": args.log_file or config["logging"]["log_file"],
    }


def main(argv=None, stdin=None, stdout=None):
    """
    Run the command line.

    Args:
        argv (list, optional): Arguments, defaulting to sys.argv[1:].
        stdin (optional): Line source used when no files are given. Defaults to sys.stdin's binary buffer.
        stdout (optional): Where generated text is written. Defaults to sys.stdout.

    Returns:
        int: Process exit status.
    """
    args = build_parser().parse_args(argv)
    stdout = stdout or sys.stdout

    try:
        config = load_config(environment=args.env, config_path=args.config)
        settings = resolve_settings(args, config)
    except (BabbleError, ValueError, KeyError) as e:
        print(f"babble: {e}", file=sys.stderr)
        return 1

    logger = get_logger(
        "babble",
        log_file=settings["log_file"],
        console_json=config["logging"]["console_json"],
        level=str(config["logging"]["level"]).upper()
    )

    resource_monitor = None
    if settings["monitor"]:
        resource_monitor = ResourceMonitor(
            logger=logger,
            memory_limit_percentage=config["monitoring"]["memory_limit_percentage"],
            monitoring_interval=config["monitoring"]["interval"]
        )

    training = config["training"]
    trainer_options = {
        "boundary_config": settings["boundaries"],
        "logger": logger,
        "resource_monitor": resource_monitor,
        "encoding": training["encoding"],
        "progress_interval": training["progress_interval"],
        "max_consecutive_read_errors": training["max_consecutive_read_errors"],
    }
    try:
        if args.files:
            documents = iter_corpus(args.files, csv_column=args.csv_column, logger=logger)
            transitions = train_documents(documents, **trainer_options)
        else:
            lines = read_lines(stdin if stdin is not None else sys.stdin.buffer)
            transitions = train(lines, **trainer_options)
    except (BabbleError, OSError, KeyError, ValueError) as e:
        logger.error(f"Training failed: {e}", extra={
            "metrics": {"files": args.files, "error": str(e)}
        })
        return 1

    log_json(logger, "Model trained", {
        "known_sources": len(transitions),
        "total_transitions": transitions.total_transitions()
    })

    generator = MarkovGenerator(
        transitions,
        boundary_config=settings["boundaries"],
        seed=settings["seed"],
        logger=logger
    )
    text = generator.generate_text(settings["max_tokens"], segments=settings["segments"])

    print(text, file=stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
