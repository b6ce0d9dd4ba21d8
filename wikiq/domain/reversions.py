# =====================================================
#                DOMAIN / REVERSIONS
# =====================================================

import hashlib
from typing import Dict, Optional


def text_digest(text: bytes) -> str:
    return hashlib.md5(text).hexdigest()


class ReversionTracker:
    """
    Maps content digests to the revision that last produced them, for one
    article. A new tracker is created for every article.
    """

    def __init__(self):
        self._revisions: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._revisions)

    def observe(self, digest: str, revision_id: str) -> Optional[str]:
        """Return the revision id stored for `digest` (if any), then store `revision_id`."""
        reverted_to = self._revisions.get(digest)
        self._revisions[digest] = revision_id
        return reverted_to
