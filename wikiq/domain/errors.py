# =====================================================
#                  DOMAIN / ERRORS
# =====================================================


class WikiqError(Exception):
    """Base class for every failure that aborts a run."""


class MalformedInputError(WikiqError):
    def __init__(self, message: str, lineno: int):
        self.message = message
        self.lineno = lineno
        super().__init__(f"XML ERROR: {message} at line {lineno}")


class RegexConfigError(WikiqError):
    def __init__(self, rule_set: str, pattern: str, reason: str):
        self.rule_set = rule_set
        self.pattern = pattern
        super().__init__(f"invalid {rule_set} regex {pattern!r}: {reason}")


class BufferGrowthError(WikiqError):
    def __init__(self, field_name: str, requested: int):
        self.field_name = field_name
        self.requested = requested
        super().__init__(
            f"could not grow buffer for field '{field_name}' to {requested:,} bytes"
        )
