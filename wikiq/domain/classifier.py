# =====================================================
#                DOMAIN / CLASSIFIER
# =====================================================

import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Sequence, Tuple

from wikiq.domain.errors import RegexConfigError


NamedPattern = Tuple[Optional[str], str]


@dataclass(frozen=True)
class ClassifierRule:
    pattern: Pattern
    name: Optional[str] = None

    def search(self, value: str) -> bool:
        # an empty field never matches, whatever the pattern
        if not value:
            return False
        return self.pattern.search(value) is not None


def compile_rule(rule_set: str, name: Optional[str], pattern: str) -> ClassifierRule:
    try:
        compiled = re.compile(pattern)
    except re.error as e:
        raise RegexConfigError(rule_set, pattern, str(e)) from e
    return ClassifierRule(pattern=compiled, name=name or None)


class RegexClassifier:
    """
    Title rules gate a revision, content rules annotate its full text and diff
    rules annotate its additions and deletions separately. All patterns are
    compiled up front so a bad one fails before any input is read.
    """

    def __init__(
        self,
        title_patterns: Sequence[str] = (),
        content_patterns: Sequence[NamedPattern] = (),
        diff_patterns: Sequence[NamedPattern] = (),
    ):
        self.title_rules = [compile_rule("title", None, p) for p in title_patterns]
        self.content_rules = [compile_rule("content", n, p) for n, p in content_patterns]
        self.diff_rules = [compile_rule("diff", n, p) for n, p in diff_patterns]

    @classmethod
    def from_config(cls, config) -> "RegexClassifier":
        return cls(
            title_patterns=config.title_patterns,
            content_patterns=config.content_patterns,
            diff_patterns=config.diff_patterns,
        )

    def header_columns(self) -> List[str]:
        columns = []
        for idx, rule in enumerate(self.content_rules):
            columns.append(rule.name or f"regex{idx}")
        for idx, rule in enumerate(self.diff_rules):
            label = rule.name or f"regex_{idx}"
            columns.append(f"{label}_add")
            columns.append(f"{label}_del")
        return columns

    def title_passes(self, title: str) -> bool:
        if not self.title_rules:
            return True
        return any(rule.search(title) for rule in self.title_rules)

    def match_content(self, text: str) -> List[bool]:
        return [rule.search(text) for rule in self.content_rules]

    def match_diff(self, additions: str, deletions: str) -> List[bool]:
        """One (additions, deletions) pair of flags per diff rule, flattened."""
        matches = []
        for rule in self.diff_rules:
            matches.append(rule.search(additions))
            matches.append(rule.search(deletions))
        return matches
