"""
Error Message Sanitization for log output.

Error messages built from HTTP responses, aiohttp exceptions and request
context can carry secrets: a signed LMv1 Authorization header, an access
key pasted into a config value, or a token echoed back in an error body.
Everything that is logged at the end of a workflow run, and every response
body stored on an APIError, passes through this module first.

Usage:
    from src.lmtoggle.api.error_sanitizer import sanitize_error_message

    try:
        await client.patch(path, json_body=body)
    except LMError as e:
        logger.error(sanitize_error_message(str(e), "Instance update failed"))

What Gets Sanitized
-------------------
1. LMv1 signatures:  LMv1 abc:c2lnbmF0dXJl:1700000000000 → LMv1 [REDACTED]
2. Access keys:      access_key=... / LM_ACCESS_KEY=...  → access_key=[REDACTED]
3. Bearer tokens, generic api_key/secret/password assignments
4. Long base64 and hex strings (signatures, digests, raw keys)
5. Local file paths and Python stack traces

Pattern order matters: specific patterns come before generic ones.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional


@dataclass
class SanitizationResult:
    """Result of error message sanitization.

    Attributes:
        sanitized_message: Sanitized error message (safe to log)
        redaction_count: Number of redactions made
        original_length: Length of original message
        sanitized_length: Length of sanitized message
    """

    sanitized_message: str
    redaction_count: int
    original_length: int
    sanitized_length: int

    @property
    def was_sanitized(self) -> bool:
        return self.redaction_count > 0


class ErrorSanitizer:
    """Redacts credentials and signatures from error messages.

    Attributes:
        patterns: List of (regex_pattern, replacement) tuples
        max_message_length: Maximum length of sanitized messages
    """

    DEFAULT_PATTERNS: list[tuple[str, str]] = [
        # LMv1 Authorization header values (id:signature:epoch)
        (r'LMv1\s+[^\s:]+:[A-Za-z0-9+/=]+:\d+', 'LMv1 [REDACTED]'),

        # Authentication tokens and keys
        (r'bearer\s+[A-Za-z0-9_\-\.]+', 'Bearer [REDACTED]'),
        (r'access[-_]?key[=:\s]+[^\s\n,;]+', 'access_key=[REDACTED]'),
        (r'api[-_]?key[=:\s]+[^\s\n,;]+', 'api_key=[REDACTED]'),
        (r'api[-_]?secret[=:\s]+[^\s\n,;]+', 'api_secret=[REDACTED]'),
        (r'access[-_]?token[=:\s]+[^\s\n,;]+', 'access_token=[REDACTED]'),

        # Passwords and secrets
        (r'password[=:\s]+[^\s\n,;]+', 'password=[REDACTED]'),
        (r'secret[=:\s]+[^\s\n,;]+', 'secret=[REDACTED]'),

        # File paths (Unix and Windows)
        (r'/(?:home|root|usr|var|etc|opt|mnt)/[^\s\n,;]+', '[FILE_PATH]'),
        (r'[A-Z]:\\[^\s\n,;]+', '[FILE_PATH]'),

        # Stack traces (Python)
        (r'Traceback \(most recent call last\):[\s\S]*?(?=\n\n|\n[A-Z]|\Z)', '[STACK_TRACE]'),
        (r'File "([^"]+)", line \d+', 'File "[REDACTED]", line [REDACTED]'),

        # Long base64 strings (signatures, raw keys)
        (r'\b[A-Za-z0-9+/]{40,}={0,2}', '[BASE64_REDACTED]'),

        # Hex strings that look like digests (32+ chars)
        (r'\b[0-9a-fA-F]{32,}\b', '[HEX_STRING]'),
    ]

    def __init__(
        self,
        patterns: Optional[list[tuple[str, str]]] = None,
        max_message_length: int = 500,
    ):
        """Initialize the sanitizer.

        Args:
            patterns: Custom patterns to use (defaults to DEFAULT_PATTERNS)
            max_message_length: Maximum length of sanitized message
        """
        self.patterns = list(patterns or self.DEFAULT_PATTERNS)
        self.max_message_length = max_message_length
        self._compiled_patterns = [
            (re.compile(pattern, re.IGNORECASE), replacement)
            for pattern, replacement in self.patterns
        ]

    def sanitize(self, message: str, error_type: Optional[str] = None) -> SanitizationResult:
        """Sanitize an error message for logging.

        Args:
            message: Raw error message
            error_type: Optional error type/category used as a prefix

        Returns:
            SanitizationResult with sanitized message
        """
        if not message:
            return SanitizationResult(
                sanitized_message="An error occurred",
                redaction_count=0,
                original_length=0,
                sanitized_length=17,
            )

        original_length = len(message)
        sanitized = message
        redaction_count = 0

        for pattern, replacement in self._compiled_patterns:
            matches = len(pattern.findall(sanitized))
            if matches > 0:
                redaction_count += matches
                sanitized = pattern.sub(replacement, sanitized)

        if len(sanitized) > self.max_message_length:
            sanitized = sanitized[: self.max_message_length] + "... [TRUNCATED]"

        if not sanitized.strip():
            sanitized = "An error occurred"

        if error_type and not sanitized.startswith(error_type):
            sanitized = f"{error_type}: {sanitized}"

        return SanitizationResult(
            sanitized_message=sanitized,
            redaction_count=redaction_count,
            original_length=original_length,
            sanitized_length=len(sanitized),
        )

    def add_pattern(self, pattern: str, replacement: str) -> None:
        """Add a custom sanitization pattern."""
        self.patterns.append((pattern, replacement))
        self._compiled_patterns.append(
            (re.compile(pattern, re.IGNORECASE), replacement)
        )

    def is_safe(self, message: str) -> bool:
        """Check whether message contains nothing that would be redacted."""
        for pattern, _ in self._compiled_patterns:
            if pattern.search(message):
                return False
        return True


_default_sanitizer: Optional[ErrorSanitizer] = None


def get_sanitizer() -> ErrorSanitizer:
    """Get the default error sanitizer instance."""
    global _default_sanitizer
    if _default_sanitizer is None:
        _default_sanitizer = ErrorSanitizer()
    return _default_sanitizer


def sanitize_error_message(
    message: str,
    error_type: Optional[str] = None,
) -> str:
    """Convenience function to sanitize error messages.

    Example:
        >>> sanitize_error_message("rejected LMv1 id1:c2ln:1700000000000")
        'rejected LMv1 [REDACTED]'
    """
    return get_sanitizer().sanitize(message, error_type).sanitized_message
