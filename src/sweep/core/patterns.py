"""
Whitelist pattern compilation for sweep.

Turns user-authored whitelist strings into matchers. Supported syntaxes:
- ``regex:<body>``: raw regular expression
- ``/<body>/<flags>``: regex literal (flags from ``dgimsuvy``)
- Globs: ``*`` (no directory crossing), ``**`` (any depth), ``?``;
  a trailing ``/`` whitelists a folder and everything beneath it
- Literals: with a ``/`` an exact path, otherwise an exact basename

Regex bodies pass through a best-effort safety gate that rejects shapes
known for catastrophic backtracking before they are ever compiled.
Backslashes become forward slashes in globs and literals only.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Union

from sweep.core.errors import UnsafePatternError

logger = logging.getLogger(__name__)

REGEX_PREFIX = "regex:"
MAX_REGEX_LENGTH = 300

_REGEX_LITERAL = re.compile(r"^/(.*)/([dgimsuvy]*)$", re.DOTALL)
_GLOB_CHARS = re.compile(r"[*?]")

# Flags with a Python counterpart; d, g, u, v and y are accepted and ignored
_FLAG_MAP = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
}

# Shapes rejected by the safety gate, paired with the reason reported
_DANGEROUS_SHAPES: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(r"\((?:[^)(]|\([^)(]*\))*[+*](?:[^)(]|\([^)(]*\))*\)[+*{]"),
        "nested quantifier",
    ),
    (re.compile(r"\(\.[*+]\)[+*]"), "quantified wildcard group"),
    (re.compile(r"\([^()]*\|[^()]*\)[+*{]"), "quantified alternation"),
    (re.compile(r"\\[1-9]|\(\?P="), "backreference"),
    (re.compile(r"\(\?<?[=!]"), "lookaround assertion"),
]


@dataclass(frozen=True)
class ExactPath:
    """Literal pattern containing a path separator."""

    path: str


@dataclass(frozen=True)
class ExactBasename:
    """Literal pattern without a path separator."""

    name: str


@dataclass(frozen=True)
class RegexPattern:
    """
    A compiled regular expression tagged with the pattern it came from.

    Attributes:
        source: Whitelist pattern as written (normalized), for diagnostics
        regex: Compiled expression, tested with search semantics
    """

    source: str
    regex: re.Pattern[str]

    def matches(self, text: str) -> bool:
        return self.regex.search(text) is not None


CompiledPattern = Union[ExactPath, ExactBasename, RegexPattern]


@dataclass(frozen=True)
class InvalidPattern:
    """A whitelist pattern that failed to compile, with a readable reason."""

    pattern: str
    reason: str


@dataclass
class CompiledWhitelist:
    """All compiled patterns of one app, split into lookup buckets."""

    exact_paths: set[str] = field(default_factory=set)
    exact_basenames: set[str] = field(default_factory=set)
    regexes: list[RegexPattern] = field(default_factory=list)
    invalid: list[InvalidPattern] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.exact_paths or self.exact_basenames or self.regexes)

    @property
    def is_valid(self) -> bool:
        return not self.invalid

    def add(self, compiled: CompiledPattern) -> None:
        if isinstance(compiled, ExactPath):
            self.exact_paths.add(compiled.path)
        elif isinstance(compiled, ExactBasename):
            self.exact_basenames.add(compiled.name)
        else:
            self.regexes.append(compiled)


def is_regex_syntax(pattern: str) -> bool:
    return pattern.startswith(REGEX_PREFIX) or _REGEX_LITERAL.match(pattern) is not None


def normalize_pattern(raw: str) -> str:
    """
    Trim a raw pattern. Globs and literals get forward slashes; regex
    bodies keep their backslashes so escapes and backreferences survive.
    """
    pattern = str(raw).strip()
    if is_regex_syntax(pattern):
        return pattern
    return pattern.replace("\\", "/")


def is_comment(raw: object) -> bool:
    return isinstance(raw, str) and raw.strip().startswith("//")


def validate_regex_safety(body: str) -> None:
    """
    Reject regex bodies that are empty, too long, or shaped for catastrophic
    backtracking.

    This is a static denylist, not a proof of safety.

    Raises:
        UnsafePatternError: If the body is rejected
    """
    if not body or len(body) > MAX_REGEX_LENGTH:
        raise UnsafePatternError(
            f"Regex pattern is empty or too long (>{MAX_REGEX_LENGTH} characters)"
        )
    for shape, label in _DANGEROUS_SHAPES:
        if shape.search(body):
            raise UnsafePatternError(
                f"Regex pattern rejected: potential catastrophic backtracking ({label})"
            )


def glob_to_regex(glob: str) -> str:
    """
    Translate a glob into an unanchored regex body.

    ``**`` crosses directories, ``*`` and ``?`` do not. A trailing ``/**``
    also matches the folder itself.
    """
    parts: list[str] = []
    i = 0
    length = len(glob)
    while i < length:
        char = glob[i]
        if char == "*":
            if i + 1 < length and glob[i + 1] == "*":
                if i + 2 == length and parts and parts[-1] == "/":
                    parts[-1] = "(?:/.*)?"
                else:
                    parts.append(".*")
                i += 2
                continue
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        elif char == "/":
            parts.append("/")
        else:
            parts.append(re.escape(char))
        i += 1
    return "".join(parts)


def _compile_regex(source: str, body: str, flags: int = 0) -> RegexPattern:
    validate_regex_safety(body)
    try:
        return RegexPattern(source=source, regex=re.compile(body, flags))
    except re.error as e:
        raise UnsafePatternError(f"Invalid regular expression: {e}") from e


def classify_pattern(pattern: str) -> CompiledPattern:
    """
    Parse a normalized whitelist pattern into its matcher variant.

    Args:
        pattern: Pattern as returned by normalize_pattern

    Returns:
        ExactPath, ExactBasename or RegexPattern

    Raises:
        UnsafePatternError: If a regex pattern is rejected or does not compile
        ValueError: If the pattern is empty
    """
    if not pattern:
        raise ValueError("Empty whitelist pattern")

    if pattern.startswith(REGEX_PREFIX):
        return _compile_regex(pattern, pattern[len(REGEX_PREFIX):])

    literal = _REGEX_LITERAL.match(pattern)
    if literal:
        body, flag_chars = literal.groups()
        flags = 0
        for flag in flag_chars:
            flags |= _FLAG_MAP.get(flag, 0)
        return _compile_regex(pattern, body, flags)

    if _GLOB_CHARS.search(pattern) or pattern.endswith("/"):
        glob = f"{pattern}**" if pattern.endswith("/") else pattern
        return RegexPattern(source=pattern, regex=re.compile(f"^{glob_to_regex(glob)}$"))

    if "/" in pattern:
        return ExactPath(pattern)
    return ExactBasename(pattern)


def compile_patterns(patterns: Iterable[object]) -> CompiledWhitelist:
    """
    Compile an ordered list of raw whitelist patterns.

    Empty entries and ``//`` comments are skipped. Patterns that fail to
    compile are collected in ``invalid`` rather than dropped, so callers can
    refuse to scan.
    """
    compiled = CompiledWhitelist()
    for raw in patterns:
        if raw is None or raw == "" or is_comment(raw):
            continue
        pattern = normalize_pattern(raw)
        if not pattern:
            continue
        try:
            compiled.add(classify_pattern(pattern))
        except UnsafePatternError as e:
            logger.debug(f"Rejected whitelist pattern '{pattern}': {e}")
            compiled.invalid.append(InvalidPattern(pattern=pattern, reason=str(e)))
    return compiled
