# =====================================================
#                     DOMAIN
# =====================================================

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple


class OutputMode(Enum):
    SIMPLE = "simple"
    FULL = "full"


@dataclass(frozen=True)
class WikiqConfig:
    output_mode: OutputMode = OutputMode.SIMPLE
    title_patterns: Tuple[str, ...] = ()
    content_patterns: Tuple[Tuple[Optional[str], str], ...] = ()
    diff_patterns: Tuple[Tuple[Optional[str], str], ...] = ()
    namespaces: Optional[FrozenSet[str]] = None
    chunk_size: int = 64 * 1024
    log_every: int = 100_000


class Block(Enum):
    """Nesting context the parser is currently inside."""
    TITLE = "title"
    REVISION = "revision"
    CONTRIBUTOR = "contributor"
    SKIP = "skip"


class Element(Enum):
    """Logical field that character data is routed to."""
    TITLE = "title"
    ARTICLE_ID = "article_id"
    NAMESPACE = "namespace"
    REVISION = "revision"
    REVISION_ID = "revision_id"
    TIMESTAMP = "timestamp"
    CONTRIBUTOR = "contributor"
    EDITOR = "editor"
    EDITOR_ID = "editor_id"
    MINOR = "minor"
    COMMENT = "comment"
    UNUSED = "unused"
    TEXT = "text"


@dataclass
class TokenDiff:
    additions: bytes = b""
    deletions: bytes = b""

    @property
    def additions_length(self) -> int:
        return len(self.additions)

    @property
    def deletions_length(self) -> int:
        return len(self.deletions)


@dataclass
class RevisionRecord:
    title: str
    article_id: str
    revision_id: str
    date: str
    time: str
    editor: str
    editor_id: str
    is_minor: bool
    text_length: int
    text_hash: str
    reverted_to: str
    additions_length: int
    deletions_length: int
    content_matches: List[bool] = field(default_factory=list)
    diff_matches: List[bool] = field(default_factory=list)
    comment: str = ""
    text: str = ""

    @property
    def is_anonymous(self) -> bool:
        return not self.editor
