# =====================================================
#                       MAIN
# =====================================================

import argparse
import sys
from contextlib import nullcontext

from wikiq.app.revision_processor import WikiqProcessor
from wikiq.domain.classifier import RegexClassifier
from wikiq.domain.errors import RegexConfigError, WikiqError
from wikiq.domain.models import OutputMode, WikiqConfig
from wikiq.utils.bz2_stream import open_input_stream
from wikiq.utils.logging import setup_logging
from wikiq.utils.tsv_writer import TsvRowWriter


EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


class NamedPatternAction(argparse.Action):
    """
    Appends (name, pattern) to `dest`, taking the name from the most recent
    name flag of the same rule set and then clearing it.
    """

    def __init__(self, option_strings, dest, name_dest, **kwargs):
        self.name_dest = name_dest
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        items = list(getattr(namespace, self.dest) or [])
        items.append((getattr(namespace, self.name_dest, None), values))
        setattr(namespace, self.dest, items)
        setattr(namespace, self.name_dest, None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wikiq",
        description=(
            "Convert a MediaWiki XML revision-history dump into a tab-separated "
            "stream with one row per revision.\n\n"
            "Each row carries the revision metadata, an MD5 of the text, the id "
            "of an earlier identical revision (reversion), the size of the "
            "token-level additions and deletions against the previous revision, "
            "and one TRUE/FALSE column per configured regex."
        ),
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # --------------------------------------------------
    # Input / Output
    # --------------------------------------------------
    parser.add_argument(
        "inputs",
        nargs="*",
        default=[],
        help=(
            "XML dump files, plain or .bz2, processed in the given order. "
            "Standard input is read when none (or '-') is given."
        ),
    )

    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Path to the output TSV file. Defaults to standard output.",
    )

    parser.add_argument(
        "-v", "--full",
        action="store_true",
        help="Print the comment and text of each revision after its row.",
    )

    # --------------------------------------------------
    # Regexes
    # --------------------------------------------------
    parser.add_argument(
        "-n", "--content-name",
        dest="content_name",
        default=None,
        help="Name of the following -r regex.",
    )

    parser.add_argument(
        "-r", "--content-regex",
        dest="content_patterns",
        action=NamedPatternAction,
        name_dest="content_name",
        default=[],
        help="Regex checked against the full text of each revision.",
    )

    parser.add_argument(
        "-N", "--diff-name",
        dest="diff_name",
        default=None,
        help="Name of the following -R regex.",
    )

    parser.add_argument(
        "-R", "--diff-regex",
        dest="diff_patterns",
        action=NamedPatternAction,
        name_dest="diff_name",
        default=[],
        help="Regex checked separately against the additions and deletions of each revision.",
    )

    parser.add_argument(
        "-t", "--title-regex",
        dest="title_patterns",
        action="append",
        default=[],
        help="Only emit revisions of pages whose title matches one of these regexes.",
    )

    # --------------------------------------------------
    # Processing control
    # --------------------------------------------------
    parser.add_argument(
        "--namespace",
        dest="namespaces",
        action="append",
        default=None,
        help="Only emit revisions of pages in these namespaces (e.g. 0). Repeatable.",
    )

    parser.add_argument(
        "--chunk-size",
        type=int,
        default=64 * 1024,
        help="Number of bytes fed to the XML parser at a time.",
    )

    parser.add_argument(
        "-d", "--dry-run",
        action="store_true",
        help="Print the configuration and header line, then exit without reading input.",
    )

    # --------------------------------------------------
    # Logging
    # --------------------------------------------------
    parser.add_argument(
        "--log-every",
        type=int,
        default=100_000,
        help="Log progress every N emitted revisions (0 disables).",
    )

    parser.add_argument(
        "--log-dir",
        default=None,
        help="Directory for a per-run DEBUG log file. Console logging only when unset.",
    )

    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Console log level.",
    )

    return parser


def config_from_args(args: argparse.Namespace) -> WikiqConfig:
    return WikiqConfig(
        output_mode=OutputMode.FULL if args.full else OutputMode.SIMPLE,
        title_patterns=tuple(args.title_patterns),
        content_patterns=tuple(args.content_patterns),
        diff_patterns=tuple(args.diff_patterns),
        namespaces=frozenset(args.namespaces) if args.namespaces else None,
        chunk_size=args.chunk_size,
        log_every=args.log_every,
    )


def print_dry_run(config: WikiqConfig, classifier: RegexClassifier, out):
    writer = TsvRowWriter(out, classifier.header_columns())
    out.write(f"output_mode = {config.output_mode.value}\n")
    out.write(f"title_regexes = {list(config.title_patterns)}\n")
    out.write(f"content_regexes = {list(config.content_patterns)}\n")
    out.write(f"diff_regexes = {list(config.diff_patterns)}\n")
    namespaces = sorted(config.namespaces) if config.namespaces else "all"
    out.write(f"namespaces = {namespaces}\n")
    out.write(f"header = {writer.header()}\n")


def open_output(path):
    if path is None or path == "-":
        return nullcontext(sys.stdout)
    return open(path, "w", encoding="utf-8", newline="\n")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logger = setup_logging(log_dir=args.log_dir, level=args.log_level)
    config = config_from_args(args)

    # patterns are compiled before any input is read
    try:
        classifier = RegexClassifier.from_config(config)
    except RegexConfigError as e:
        logger.error(str(e))
        return EXIT_USAGE

    if args.dry_run:
        print_dry_run(config, classifier, sys.stdout)
        return EXIT_OK

    inputs = args.inputs or [None]
    logger.info(
        "Starting | mode=%s | title_regexes=%d | content_regexes=%d | diff_regexes=%d | inputs=%d",
        config.output_mode.value,
        len(classifier.title_rules),
        len(classifier.content_rules),
        len(classifier.diff_rules),
        len(inputs),
    )

    with open_output(args.output) as out:
        processor = WikiqProcessor.from_config(config, out, logger, classifier=classifier)
        processor.writer.write_header()

        try:
            for idx, path in enumerate(inputs, 1):
                name = path if path not in (None, "-") else "<stdin>"
                logger.info("[%d/%d] Processing input: %s", idx, len(inputs), name)
                with open_input_stream(path) as stream:
                    processor.process(stream, name=name)
        except WikiqError as e:
            logger.error(str(e))
            return EXIT_FAILURE
        except OSError as e:
            logger.error("Could not read input: %s", e)
            return EXIT_FAILURE
        finally:
            out.flush()

    logger.info(
        "DONE | articles=%d | revisions=%d | skipped=%d | rows=%d",
        processor.article_count,
        processor.revision_count,
        processor.skipped_count,
        processor.writer.rows_written,
    )
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
