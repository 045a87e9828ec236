"""Security guards consulted by network-facing and regex operators."""

from pipeforge.core.security.regex import (
    MAX_PATTERN_LENGTH,
    RegexValidationResult,
    create_safe_regex,
    safe_regex_match,
    safe_regex_replace,
    safe_regex_test,
    validate_regex_pattern,
    validate_regex_pattern_with_flags,
)
from pipeforge.core.security.web import (
    DEFAULT_DOMAIN_WHITELIST,
    DomainWhitelist,
    URLSecurityResult,
    ensure_fetch_allowed,
    is_private_host,
    validate_url_security,
)

__all__ = [
    "DEFAULT_DOMAIN_WHITELIST",
    "MAX_PATTERN_LENGTH",
    "DomainWhitelist",
    "RegexValidationResult",
    "URLSecurityResult",
    "create_safe_regex",
    "ensure_fetch_allowed",
    "is_private_host",
    "safe_regex_match",
    "safe_regex_replace",
    "safe_regex_test",
    "validate_regex_pattern",
    "validate_regex_pattern_with_flags",
    "validate_url_security",
]
