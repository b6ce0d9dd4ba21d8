# =====================================================
#            APPLICATION / USE CASE
# =====================================================

import logging
import time
from typing import BinaryIO, Optional

from lxml import etree

from wikiq.app.state_machine import RevisionStateMachine
from wikiq.domain.classifier import RegexClassifier
from wikiq.domain.errors import MalformedInputError
from wikiq.domain.models import OutputMode, RevisionRecord, WikiqConfig
from wikiq.utils.bz2_stream import strip_ns
from wikiq.utils.tsv_writer import TsvRowWriter


class ParserTarget:
    """lxml parser target forwarding SAX-style events to the state machine."""

    def __init__(self, machine: RevisionStateMachine):
        self.machine = machine

    def start(self, tag, attrib):
        self.machine.start_element(strip_ns(tag))

    def end(self, tag):
        self.machine.end_element(strip_ns(tag))

    def data(self, text):
        self.machine.character_data(text.encode("utf-8"))

    def close(self):
        return self.machine.revision_count


class WikiqProcessor:
    def __init__(
        self,
        config: WikiqConfig,
        writer: TsvRowWriter,
        classifier: RegexClassifier,
        logger: logging.Logger,
    ):
        self.config = config
        self.writer = writer
        self.logger = logger
        self.machine = RevisionStateMachine(
            classifier=classifier,
            sink=self._emit,
            namespaces=config.namespaces,
            logger=logger,
        )
        self.start_time = time.time()

    @classmethod
    def from_config(
        cls,
        config: WikiqConfig,
        out,
        logger: logging.Logger,
        classifier: Optional[RegexClassifier] = None,
    ) -> "WikiqProcessor":
        if classifier is None:
            classifier = RegexClassifier.from_config(config)
        writer = TsvRowWriter(
            out,
            classifier.header_columns(),
            full=config.output_mode is OutputMode.FULL,
        )
        return cls(config, writer, classifier, logger)

    @property
    def article_count(self) -> int:
        return self.machine.article_count

    @property
    def revision_count(self) -> int:
        return self.machine.revision_count

    @property
    def skipped_count(self) -> int:
        return self.machine.skipped_count

    def process(self, stream: BinaryIO, name: Optional[str] = None):
        """Push one XML document through the parser, chunk by chunk."""
        parser = etree.XMLParser(
            target=ParserTarget(self.machine),
            huge_tree=True,
            resolve_entities=False,
        )
        try:
            for chunk in iter(lambda: stream.read(self.config.chunk_size), b""):
                parser.feed(chunk)
            parser.close()
        except etree.XMLSyntaxError as e:
            raise MalformedInputError(e.msg or str(e), e.lineno or 0) from e
        finally:
            self.machine.finish()

        self.logger.debug("Finished input %s", name or "<stdin>")

    def _emit(self, record: RevisionRecord):
        self.writer.write(record)

        count = self.machine.revision_count
        if self.config.log_every and count % self.config.log_every == 0:
            elapsed = max(time.time() - self.start_time, 1e-6)
            self.logger.info(
                f"articles={self.article_count:,} | "
                f"revisions={count:,} | "
                f"speed={count / elapsed:,.1f} rev/s"
            )
