# =====================================================
#             INFRASTRUCTURE / TSV OUTPUT
# =====================================================

from typing import List, TextIO

from wikiq.domain.models import RevisionRecord


FIXED_COLUMNS = [
    "title",
    "article_id",
    "revision_id",
    "date",
    "time",
    "is_anonymous",
    "editor",
    "editor_id",
    "is_minor",
    "text_length",
    "text_hash",
    "reverted_to",
    "additions_length",
    "deletions_length",
]

_ESCAPES = str.maketrans({"\t": "\\t", "\n": "\\n", "\r": "\\r"})


def encode(value) -> str:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return str(value).translate(_ESCAPES)


class TsvRowWriter:
    """Writes the header and one tab-separated line per revision."""

    def __init__(self, out: TextIO, classifier_columns: List[str], full: bool = False):
        self.out = out
        self.classifier_columns = list(classifier_columns)
        self.full = full
        self.rows_written = 0

    def header(self) -> str:
        return "\t".join(FIXED_COLUMNS + self.classifier_columns)

    def write_header(self):
        self.out.write(self.header() + "\n")

    def write(self, record: RevisionRecord):
        values = [
            record.title,
            record.article_id,
            record.revision_id,
            record.date,
            record.time,
            record.is_anonymous,
            record.editor,
            record.editor_id,
            record.is_minor,
            record.text_length,
            record.text_hash,
            record.reverted_to,
            record.additions_length,
            record.deletions_length,
        ]
        values.extend(record.content_matches)
        values.extend(record.diff_matches)
        self.out.write("\t".join(encode(v) for v in values) + "\n")

        if self.full:
            self.out.write(f"comment:{record.comment}\n")
            self.out.write(f"text:\n{record.text}\n")

        self.rows_written += 1
