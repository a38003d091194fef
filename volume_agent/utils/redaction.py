"""
Credential redaction for log output and command echoes.

Mount commands carry plaintext passwords in their argument list (CIFS
`pass=` option, `net use` password argument). Everything that ends up in a
log record passes through these helpers first.
"""

import logging
import re
from typing import Sequence

REDACTED = "******"

_SENSITIVE_PATTERNS = [
    # mount -o user=bob,pass=secret,uid=1000
    re.compile(r"(?i)\b(pass|password|passwd|token|secret_key)=((?:,,|[^,\s])+)"),
    # "password": "secret" in serialized objects
    re.compile(r'(?i)("(?:pass|password|passwd|token|secret_key)"\s*:\s*)"[^"]*"'),
    # encrypted secret references still count as credential material
    re.compile(r"encv1:[A-Za-z0-9_\-=]+"),
]


def sanitize_sensitive_data(text: str) -> str:
    """Mask credential values in arbitrary text."""
    text = _SENSITIVE_PATTERNS[0].sub(lambda m: f"{m.group(1)}={REDACTED}", text)
    text = _SENSITIVE_PATTERNS[1].sub(lambda m: f'{m.group(1)}"{REDACTED}"', text)
    text = _SENSITIVE_PATTERNS[2].sub(f"encv1:{REDACTED}", text)
    return text


def redact_command(command: Sequence[str], secrets: Sequence[str] = ()) -> str:
    """
    Render a command for logging with secrets masked.

    Args:
        command: The argv list that will be executed
        secrets: Plaintext values that must never appear in the output
    """
    rendered = []
    for arg in command:
        for secret in secrets:
            if secret:
                arg = arg.replace(secret, REDACTED)
        rendered.append(sanitize_sensitive_data(arg))
    return " ".join(rendered)


class SecretRedactionFilter(logging.Filter):
    """Logging filter that masks credentials in every record it sees."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            return True
        sanitized = sanitize_sensitive_data(message)
        if sanitized != message:
            record.msg = sanitized
            record.args = None
        return True
