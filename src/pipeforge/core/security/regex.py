# src/pipeforge/core/security/regex.py
"""ReDoS-safe handling of user-supplied regular expressions.

Every pattern a pipe author supplies (regex operator, filter's
matches_regex rule) goes through validate_regex_pattern before it is
compiled. The check is structural: patterns with the classic
catastrophic-backtracking shapes are rejected outright.

Known gaps: the shape checks are heuristics over the pattern text. They do
not catch every exponential pattern (e.g. overlapping alternation under a
bounded repeat such as (a|a){1,30}). MAX_PATTERN_LENGTH bounds the damage.

Flags follow the JavaScript convention the editor uses (g, i, m, s, u, y)
and are mapped onto Python's re flags by compile_js_flags.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import structlog

logger = structlog.get_logger(__name__)

MAX_PATTERN_LENGTH = 500

_DANGEROUS_PATTERNS: tuple[re.Pattern[str], ...] = (
    # Adjacent quantifiers: a++, a**, a+*, a*?
    re.compile(r"(\+|\*|\?)\s*(\+|\*|\?)"),
    # Quantified group containing a quantifier: (a+)+, (a*)*
    re.compile(r"\([^)]*(\+|\*)\s*\)\s*(\+|\*)"),
    # Quantified alternation: (a|b)+, (a|ab)*
    re.compile(r"\([^)]*\|[^)]*\)\s*(\+|\*)"),
    # Quantified backreference: \1+, \2*
    re.compile(r"\\[1-9]\d*\s*(\+|\*)"),
)

VALID_FLAGS = "gimsuy"

_FLAG_MAP = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
}

# JavaScript named groups (?<name>...) -> Python (?P<name>...); leaves
# lookbehinds (?<= and (?<! untouched.
_JS_NAMED_GROUP_RE = re.compile(r"\(\?<(?![=!])")


@dataclass(frozen=True, slots=True)
class RegexValidationResult:
    valid: bool
    error: str | None = None


@dataclass(frozen=True, slots=True)
class CompiledRegex:
    """A compiled, vetted pattern plus the JS flags that affect how it is applied.

    Attributes:
        pattern: The compiled Python pattern.
        global_: "g" flag; replace every match rather than the first.
        sticky: "y" flag; only match at the start of the subject.
    """

    pattern: re.Pattern[str]
    global_: bool = False
    sticky: bool = False

    def search(self, subject: str) -> re.Match[str] | None:
        if self.sticky:
            return self.pattern.match(subject)
        return self.pattern.search(subject)

    def replace(self, js_replacement: str, subject: str) -> str:
        """Replace using a JavaScript-style replacement string ($1, $&, $<name>)."""
        return self.sub(translate_js_replacement(js_replacement, self.pattern), subject)

    def sub(self, replacement: str, subject: str) -> str:
        if self.sticky:
            match = self.pattern.match(subject)
            if match is None:
                return subject
            return subject[: match.start()] + match.expand(replacement) + subject[match.end() :]
        return self.pattern.sub(replacement, subject, count=0 if self.global_ else 1)


def _translate_pattern(pattern: str) -> str:
    return _JS_NAMED_GROUP_RE.sub("(?P<", pattern)


def validate_regex_pattern(pattern: object) -> RegexValidationResult:
    """Check a pattern for length, ReDoS shapes, and syntax.

    Examples:
        >>> validate_regex_pattern("^[a-z]+$").valid
        True
        >>> validate_regex_pattern("(a+)+").error
        'Invalid regex: Pattern may cause performance issues'
    """
    if not isinstance(pattern, str) or not pattern:
        return RegexValidationResult(valid=False, error="Pattern is required")

    if len(pattern) > MAX_PATTERN_LENGTH:
        return RegexValidationResult(
            valid=False,
            error=f"Invalid regex: Pattern too long (max {MAX_PATTERN_LENGTH} characters)",
        )

    for dangerous in _DANGEROUS_PATTERNS:
        if dangerous.search(pattern):
            return RegexValidationResult(valid=False, error="Invalid regex: Pattern may cause performance issues")

    try:
        re.compile(_translate_pattern(pattern))
    except re.error as e:
        return RegexValidationResult(valid=False, error=f"Invalid regex: {e}")

    return RegexValidationResult(valid=True)


def _validate_flags(flags: str) -> RegexValidationResult:
    if any(flag not in VALID_FLAGS for flag in flags):
        return RegexValidationResult(
            valid=False,
            error="Invalid regex: Invalid flags (valid flags are: g, i, m, s, u, y)",
        )
    if len(set(flags)) != len(flags):
        return RegexValidationResult(valid=False, error="Invalid regex: Duplicate flags are not allowed")
    return RegexValidationResult(valid=True)


def validate_regex_pattern_with_flags(pattern: object, flags: str | None = None) -> RegexValidationResult:
    result = validate_regex_pattern(pattern)
    if not result.valid or not flags:
        return result
    return _validate_flags(flags)


def compile_js_flags(flags: str | None) -> int:
    """Map JavaScript regex flags onto re flags (g, u, y are handled elsewhere)."""
    compiled = 0
    for flag in flags or "":
        compiled |= _FLAG_MAP.get(flag, 0)
    return compiled


def create_safe_regex(pattern: object, flags: str | None = None) -> CompiledRegex | None:
    """Compile a vetted pattern, or return None if it fails any guard."""
    result = validate_regex_pattern_with_flags(pattern, flags)
    if not result.valid:
        logger.debug("regex_rejected", error=result.error)
        return None
    flags = flags or ""
    return CompiledRegex(
        pattern=re.compile(_translate_pattern(str(pattern)), compile_js_flags(flags)),
        global_="g" in flags,
        sticky="y" in flags,
    )


def safe_regex_test(pattern: object, subject: str, flags: str | None = None) -> bool:
    """True if the pattern matches anywhere in subject; False if rejected."""
    regex = create_safe_regex(pattern, flags)
    if regex is None:
        return False
    return regex.search(subject) is not None


def safe_regex_match(pattern: object, subject: str, flags: str | None = None) -> re.Match[str] | None:
    regex = create_safe_regex(pattern, flags)
    if regex is None:
        return None
    return regex.search(subject)


def safe_regex_replace(pattern: object, subject: str, replacement: str, flags: str | None = None) -> str:
    """Replace matches; a rejected pattern leaves subject unchanged."""
    regex = create_safe_regex(pattern, flags)
    if regex is None:
        return subject
    return regex.replace(replacement, subject)


_JS_REPLACEMENT_TOKEN_RE = re.compile(r"\$(\$|&|\d{1,2}|<[A-Za-z_][A-Za-z0-9_]*>)")


def translate_js_replacement(replacement: str, pattern: re.Pattern[str]) -> str:
    r"""Convert a JavaScript replacement string into a Python template.

    $1 -> \g<1>, $& -> \g<0>, $<name> -> \g<name>, $$ -> $. References to
    groups the pattern does not define stay literal, as in JavaScript.
    Backslashes in the input are literal.
    """
    escaped = replacement.replace("\\", "\\\\")

    def _convert(match: re.Match[str]) -> str:
        token = match.group(1)
        if token == "$":
            return "$"
        if token == "&":
            return r"\g<0>"
        if token.startswith("<"):
            if token[1:-1] not in pattern.groupindex:
                return match.group(0)
            return rf"\g{token}"
        if int(token) > pattern.groups:
            return match.group(0)
        return rf"\g<{int(token)}>"

    return _JS_REPLACEMENT_TOKEN_RE.sub(_convert, escaped)
