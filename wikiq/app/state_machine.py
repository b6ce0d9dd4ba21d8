# =====================================================
#          APPLICATION / ELEMENT STATE MACHINE
# =====================================================
"""
Routes parser events to per-article and per-revision fields.

State is two-level: `block` says which part of the page we are inside
(title block, revision, contributor, or skipped) and `element` says which
field incoming character data belongs to. The same tag name (`id`) maps to a
different field depending on the block, so no tag stack is needed.
"""

import logging
from typing import Callable, FrozenSet, List, Optional

from wikiq.domain.buffers import FieldBuffer
from wikiq.domain.classifier import RegexClassifier
from wikiq.domain.diff import diff_revision, tokenize
from wikiq.domain.models import Block, Element, RevisionRecord
from wikiq.domain.reversions import ReversionTracker, text_digest
from wikiq.domain.timestamp import TIMESTAMP_LENGTH, split_timestamp


# tag -> (new block or None to keep the current one, new element)
OPEN_TRANSITIONS = {
    "revision": (Block.REVISION, Element.REVISION),
    "contributor": (Block.CONTRIBUTOR, Element.CONTRIBUTOR),
    "minor": (None, Element.MINOR),
    "timestamp": (None, Element.TIMESTAMP),
    "username": (None, Element.EDITOR),
    "ip": (None, Element.EDITOR_ID),
    "comment": (None, Element.COMMENT),
    "text": (None, Element.TEXT),
    "page": (None, Element.UNUSED),
    "mediawiki": (None, Element.UNUSED),
    "restrictions": (None, Element.UNUSED),
    "siteinfo": (None, Element.UNUSED),
}

# tags whose meaning depends on the enclosing block
BLOCK_TRANSITIONS = {
    "id": {
        Block.TITLE: Element.ARTICLE_ID,
        Block.REVISION: Element.REVISION_ID,
        Block.CONTRIBUTOR: Element.EDITOR_ID,
    },
    "ns": {
        Block.TITLE: Element.NAMESPACE,
    },
}

TEXT_BUFFER_SIZE = 64 * 1024


class ArticleContext:
    """Everything scoped to one article. Replaced wholesale on every `title`."""

    def __init__(self):
        self.title = FieldBuffer("title")
        self.article_id = FieldBuffer("article_id")
        self.namespace = FieldBuffer("namespace")
        self.reversions = ReversionTracker()
        self.previous_tokens: Optional[List[bytes]] = None
        self.revision_count = 0


class RevisionFields:
    def __init__(self):
        self.revision_id = FieldBuffer("revision_id")
        self.timestamp = FieldBuffer("timestamp")
        self.editor = FieldBuffer("editor")
        self.editor_id = FieldBuffer("editor_id")
        self.comment = FieldBuffer("comment")
        self.text = FieldBuffer("text", initial_capacity=TEXT_BUFFER_SIZE)
        self.date = ""
        self.time = ""
        self.is_minor = False

    def reset(self, release: bool = False):
        for buf in (
            self.revision_id,
            self.timestamp,
            self.editor,
            self.editor_id,
            self.comment,
            self.text,
        ):
            buf.reset(release=release)
        self.date = ""
        self.time = ""
        self.is_minor = False


class RevisionStateMachine:
    def __init__(
        self,
        classifier: RegexClassifier,
        sink: Callable[[RevisionRecord], None],
        namespaces: Optional[FrozenSet[str]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.classifier = classifier
        self.sink = sink
        self.namespaces = namespaces
        self.logger = logger or logging.getLogger(__name__)

        # nothing before the first <title> belongs to an article
        self.block = Block.SKIP
        self.element = Element.UNUSED
        self.article: Optional[ArticleContext] = None
        self.revision = RevisionFields()

        self.article_count = 0
        self.revision_count = 0
        self.skipped_count = 0

    # --------------------------------------------------
    # Parser events
    # --------------------------------------------------
    def start_element(self, name: str):
        if name == "title":
            self._begin_article()
            return

        if self.block is Block.SKIP:
            return

        if name in OPEN_TRANSITIONS:
            block, element = OPEN_TRANSITIONS[name]
            if block is not None:
                self.block = block
            self.element = element
            # <minor/> carries no character data
            if element is Element.MINOR:
                self.revision.is_minor = True
        elif name in BLOCK_TRANSITIONS:
            element = BLOCK_TRANSITIONS[name].get(self.block)
            if element is not None:
                self.element = element

    def end_element(self, name: str):
        if name == "revision":
            if self.block is not Block.SKIP:
                self._finish_revision()
            elif self.article is not None:
                self.skipped_count += 1
            self.revision.reset()
        elif self.element is Element.NAMESPACE and self.block is not Block.SKIP:
            self._check_namespace()
        # drop whitespace and other text between tags
        self.element = Element.UNUSED

    def character_data(self, data: bytes):
        if self.element is Element.UNUSED or self.block is Block.SKIP:
            return

        buf = self._buffer_for(self.element)
        if buf is None:
            return
        buf.append(data)

        if self.element is Element.TIMESTAMP and len(buf) == TIMESTAMP_LENGTH:
            self.revision.date, self.revision.time = split_timestamp(buf.text())

    def finish(self):
        """End of input: release the current article."""
        self._end_article()
        self.block = Block.SKIP
        self.element = Element.UNUSED

    # --------------------------------------------------
    # Scope boundaries
    # --------------------------------------------------
    def _begin_article(self):
        self._end_article()
        self.article = ArticleContext()
        self.revision.reset(release=True)
        self.block = Block.TITLE
        self.element = Element.TITLE
        self.article_count += 1

    def _end_article(self):
        if self.article is None:
            return
        self.logger.debug(
            "Finished article title=%s article_id=%s revisions=%d",
            self.article.title.text(),
            self.article.article_id.text(),
            self.article.revision_count,
        )
        self.article = None

    def _check_namespace(self):
        if self.namespaces is None:
            return
        namespace = self.article.namespace.text().strip()
        if namespace not in self.namespaces:
            self.logger.debug(
                "Skipping article title=%s namespace=%s",
                self.article.title.text(),
                namespace,
            )
            self.block = Block.SKIP

    def _buffer_for(self, element: Element) -> Optional[FieldBuffer]:
        article = self.article
        revision = self.revision
        return {
            Element.TITLE: article.title,
            Element.ARTICLE_ID: article.article_id,
            Element.NAMESPACE: article.namespace,
            Element.REVISION_ID: revision.revision_id,
            Element.TIMESTAMP: revision.timestamp,
            Element.EDITOR: revision.editor,
            Element.EDITOR_ID: revision.editor_id,
            Element.COMMENT: revision.comment,
            Element.TEXT: revision.text,
        }.get(element)

    # --------------------------------------------------
    # Revision finalisation
    # --------------------------------------------------
    def _finish_revision(self):
        article = self.article
        fields = self.revision

        text = fields.text.getvalue()
        revision_id = fields.revision_id.text()

        # lookup happens before this revision is recorded
        digest = text_digest(text)
        reverted_to = article.reversions.observe(digest, revision_id)

        title = article.title.text()
        if not self.classifier.title_passes(title):
            self.skipped_count += 1
            return

        tokens = tokenize(text)
        diff = diff_revision(article.previous_tokens, text, tokens)
        article.previous_tokens = tokens

        decoded = text.decode("utf-8", errors="replace")
        diff_matches = []
        if self.classifier.diff_rules:
            diff_matches = self.classifier.match_diff(
                diff.additions.decode("utf-8", errors="replace"),
                diff.deletions.decode("utf-8", errors="replace"),
            )

        record = RevisionRecord(
            title=title,
            article_id=article.article_id.text(),
            revision_id=revision_id,
            date=fields.date,
            time=fields.time,
            editor=fields.editor.text(),
            editor_id=fields.editor_id.text(),
            is_minor=fields.is_minor,
            text_length=len(text),
            text_hash=digest,
            reverted_to=reverted_to or "",
            additions_length=diff.additions_length,
            deletions_length=diff.deletions_length,
            content_matches=self.classifier.match_content(decoded),
            diff_matches=diff_matches,
            comment=fields.comment.text(),
            text=decoded,
        )

        article.revision_count += 1
        self.revision_count += 1
        self.sink(record)
