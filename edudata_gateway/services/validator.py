"""Request sanitization and endpoint allowlist checks."""

import re
import unicodedata

from edudata_gateway.core.endpoints import Endpoint, EndpointRegistry
from edudata_gateway.core.exceptions import ValidationError

# Control characters except tab, newline and carriage return
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def sanitize_string(value: str) -> str:
    """NFKC-normalize, trim, and strip control characters."""
    return _CONTROL_CHARS.sub("", unicodedata.normalize("NFKC", value).strip())


def validate_endpoint(level: str, source: str, topic: str, registry: EndpointRegistry) -> Endpoint:
    """Return the allowed endpoint for level/source/topic or raise ValidationError."""
    endpoint = registry.find(level, source, topic)
    if endpoint is None:
        raise ValidationError(
            f"Invalid endpoint: {level}/{source}/{topic}",
            field="endpoint",
            expected="Valid endpoint from available endpoints list",
            received=f"{level}/{source}/{topic}",
        )
    return endpoint
