"""Tests for tokenization and the token-level edit script."""

from __future__ import annotations

import random
import time
from typing import List

import pytest

from wikiq.domain.diff import (
    DELETE,
    INSERT,
    KEEP,
    diff_revision,
    diff_tokens,
    edit_script,
    tokenize,
)


def _lcs_length(a: List[bytes], b: List[bytes]) -> int:
    previous = [0] * (len(b) + 1)
    for x in a:
        current = [0]
        for j, y in enumerate(b):
            current.append(previous[j] + 1 if x == y else max(previous[j + 1], current[j]))
        previous = current
    return previous[-1]


class TestTokenize:
    def test_splits_on_space_tab_newline_cr(self) -> None:
        assert tokenize(b"a b\tc\nd\re") == [b"a", b"b", b"c", b"d", b"e"]

    def test_runs_and_edges_produce_no_empty_tokens(self) -> None:
        assert tokenize(b"  a  \r\n\t b  ") == [b"a", b"b"]

    def test_empty_and_blank_text(self) -> None:
        assert tokenize(b"") == []
        assert tokenize(b" \n\t") == []

    def test_other_whitespace_is_part_of_a_token(self) -> None:
        assert tokenize(b"a\x0bb c") == [b"a\x0bb", b"c"]


class TestDiffTokens:
    def test_identical_sequences_have_no_changes(self) -> None:
        tokens = tokenize(b"the quick brown fox")
        diff = diff_tokens(tokens, list(tokens))
        assert diff.additions == b""
        assert diff.deletions == b""

    def test_insertion_and_deletion_are_concatenated(self) -> None:
        old = tokenize(b"the quick brown fox")
        new = tokenize(b"the slow brown dog jumps")

        diff = diff_tokens(old, new)

        assert diff.additions == b"slowdogjumps"
        assert diff.deletions == b"quickfox"
        assert diff.additions_length == len(b"slowdogjumps")
        assert diff.deletions_length == len(b"quickfox")

    def test_pure_append(self) -> None:
        diff = diff_tokens([b"a", b"b"], [b"a", b"b", b"c", b"d"])
        assert diff.additions == b"cd"
        assert diff.deletions == b""

    def test_everything_deleted(self) -> None:
        diff = diff_tokens([b"a", b"b"], [])
        assert diff.additions == b""
        assert diff.deletions == b"ab"

    def test_no_common_tokens(self) -> None:
        diff = diff_tokens([b"x"], [b"y"])
        assert diff.additions == b"y"
        assert diff.deletions == b"x"

    @pytest.mark.parametrize(
        "old, new, added, deleted",
        [
            (b"Hello world", b"Hello there", b"there", b"world"),
            (b"a b c", b"a X c", b"X", b"b"),
            (b"a b c", b"X b c", b"X", b"a"),
            (b"a b c", b"a b X", b"X", b"c"),
        ],
    )
    def test_single_word_replacement(self, old, new, added, deleted) -> None:
        diff = diff_tokens(tokenize(old), tokenize(new))
        assert diff.additions == added
        assert diff.deletions == deleted

    def test_moved_token(self) -> None:
        script = edit_script([b"a", b"b"], [b"c", b"a"])
        assert [op for op, _ in script].count(KEEP) == 1
        assert (INSERT, b"c") in script
        assert (DELETE, b"b") in script


class TestEditScriptProperties:
    @pytest.mark.parametrize("seed", range(60))
    def test_script_is_valid_and_minimal(self, seed: int) -> None:
        rng = random.Random(seed)
        alphabet = [b"a", b"b", b"c", b"d", b"e"][:rng.randint(1, 5)]
        old = [rng.choice(alphabet) for _ in range(rng.randint(0, 30))]
        new = [rng.choice(alphabet) for _ in range(rng.randint(0, 30))]

        script = edit_script(old, new)

        assert [t for op, t in script if op != INSERT] == old
        assert [t for op, t in script if op != DELETE] == new
        kept = sum(1 for op, _ in script if op == KEEP)
        assert kept == _lcs_length(old, new)

    def test_large_revision_with_small_edit(self) -> None:
        old = [b"w%d" % i for i in range(30_000)]
        new = list(old)
        new[15_000] = b"changed"
        new.insert(20_000, b"inserted")

        diff = diff_tokens(old, new)

        assert diff.additions == b"changedinserted"
        assert diff.deletions == b"w15000"

    def test_large_rewrite_completes(self) -> None:
        old = [b"o%d" % i for i in range(300)]
        new = [b"n%d" % i for i in range(300)]

        diff = diff_tokens(old, new)

        assert diff.deletions == b"".join(old)
        assert diff.additions == b"".join(new)

    def test_full_page_replacement_is_fast(self) -> None:
        old = [b"a%d" % i for i in range(20_000)]
        new = [b"b%d" % i for i in range(20_000)]

        started = time.perf_counter()
        diff = diff_tokens(old, new)
        elapsed = time.perf_counter() - started

        assert diff.deletions == b"".join(old)
        assert diff.additions == b"".join(new)
        assert elapsed < 5.0

    def test_more_distinct_tokens_than_the_bmp(self) -> None:
        old = [b"t%d" % i for i in range(70_000)]
        new = list(old)
        new[60_000] = b"edited"

        diff = diff_tokens(old, new)

        assert diff.additions == b"edited"
        assert diff.deletions == b"t60000"


class TestDiffRevision:
    def test_first_revision_adds_whole_text(self) -> None:
        diff = diff_revision(None, b"a b c", tokenize(b"a b c"))
        assert diff.additions == b"a b c"
        assert diff.deletions == b""

    def test_previous_empty_text_counts_as_first(self) -> None:
        diff = diff_revision([], b"new text", tokenize(b"new text"))
        assert diff.additions == b"new text"

    def test_against_previous_tokens(self) -> None:
        diff = diff_revision(tokenize(b"a b c"), b"a b c d", tokenize(b"a b c d"))
        assert diff.additions == b"d"
        assert diff.deletions == b""

    def test_same_text_twice(self) -> None:
        tokens = tokenize(b"a b c")
        diff = diff_revision(tokens, b"a b c", tokenize(b"a b c"))
        assert diff.additions_length == 0
        assert diff.deletions_length == 0
