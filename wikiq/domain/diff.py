# =====================================================
#                   DOMAIN / DIFF
# =====================================================
"""
Token-level diff between consecutive revisions of an article.

Each distinct token is mapped to one character so diff-match-patch can run
its Myers diff over whole tokens. The timeout is disabled, which keeps the
edit script minimal.
"""

import re
from typing import Dict, List, Optional, Sequence, Tuple

from diff_match_patch import diff_match_patch

from wikiq.domain.models import TokenDiff


KEEP = "="
INSERT = "+"
DELETE = "-"

TOKEN_SEPARATOR = re.compile(rb"[ \t\n\r]+")

EditScript = List[Tuple[str, bytes]]

_OPS = {
    diff_match_patch.DIFF_EQUAL: KEEP,
    diff_match_patch.DIFF_INSERT: INSERT,
    diff_match_patch.DIFF_DELETE: DELETE,
}


def tokenize(text: bytes) -> List[bytes]:
    return [token for token in TOKEN_SEPARATOR.split(text) if token]


def hash_tokens(
    tokens: Sequence[bytes],
    hash_to_token: List[bytes],
    token_to_hash: Dict[bytes, int],
) -> str:
    """One character per token; the tables are shared between both sides."""
    chars = []
    for token in tokens:
        hash_id = token_to_hash.get(token)
        if hash_id is None:
            hash_id = len(hash_to_token)
            hash_to_token.append(token)
            token_to_hash[token] = hash_id
        chars.append(chr(hash_id + 1))
    return "".join(chars)


def edit_script(old: Sequence[bytes], new: Sequence[bytes]) -> EditScript:
    """Minimal keep/insert/delete script turning `old` into `new`, in document order."""
    hash_to_token: List[bytes] = []
    token_to_hash: Dict[bytes, int] = {}
    old_hashes = hash_tokens(old, hash_to_token, token_to_hash)
    new_hashes = hash_tokens(new, hash_to_token, token_to_hash)

    # full rewrite: nothing to align
    if set(old_hashes).isdisjoint(new_hashes):
        return [(DELETE, t) for t in old] + [(INSERT, t) for t in new]

    dmp = diff_match_patch()
    dmp.Diff_Timeout = 0

    script: EditScript = []
    for op, hashes in dmp.diff_main(old_hashes, new_hashes, checklines=False):
        tag = _OPS[op]
        script.extend((tag, hash_to_token[ord(h) - 1]) for h in hashes)
    return script


def diff_tokens(old: Sequence[bytes], new: Sequence[bytes]) -> TokenDiff:
    inserted = []
    deleted = []
    for op, token in edit_script(old, new):
        if op == INSERT:
            inserted.append(token)
        elif op == DELETE:
            deleted.append(token)
    return TokenDiff(additions=b"".join(inserted), deletions=b"".join(deleted))


def diff_revision(
    previous_tokens: Optional[Sequence[bytes]],
    text: bytes,
    tokens: Sequence[bytes],
) -> TokenDiff:
    # first revision of an article (or one following an empty text):
    # everything is an addition
    if not previous_tokens:
        return TokenDiff(additions=text)
    return diff_tokens(previous_tokens, tokens)
