"""Response token budget: estimate the size of the exact payload and reject it if too big."""

import math

from pydantic import BaseModel

from edudata_gateway.core.exceptions import TokenLimitError
from edudata_gateway.core.logging import get_logger

# Conservative: overestimates tokens for typical JSON
CHARS_PER_TOKEN = 3


class TokenEstimate(BaseModel):
    character_count: int
    estimated_tokens: int
    exceeds_limit: bool
    exceeds_warning: bool = False


def estimate_tokens(payload: str | bytes, max_tokens: int, warning_tokens: int | None = None) -> TokenEstimate:
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8")
    character_count = len(payload)
    estimated = math.ceil(character_count / CHARS_PER_TOKEN)
    return TokenEstimate(
        character_count=character_count,
        estimated_tokens=estimated,
        exceeds_limit=estimated > max_tokens,
        exceeds_warning=warning_tokens is not None and estimated > warning_tokens,
    )


def enforce_token_budget(
    payload: str | bytes,
    *,
    max_tokens: int,
    warning_tokens: int | None = None,
    limit: int | None = None,
) -> TokenEstimate:
    """
    Raise TokenLimitError when the serialized payload is estimated over max_tokens.

    Runs on the final bytes about to be sent. Never truncates; a payload over
    budget is always rejected so page_size and total_count stay truthful.
    """
    estimate = estimate_tokens(payload, max_tokens, warning_tokens)
    if estimate.exceeds_limit:
        get_logger(__name__).warning(
            "response_token_limit_exceeded",
            estimated_tokens=estimate.estimated_tokens,
            max_tokens=max_tokens,
            limit=limit,
        )
        raise TokenLimitError(
            estimated_tokens=estimate.estimated_tokens,
            limit=max_tokens,
            suggestions=[
                f"Reduce limit (current: {limit})" if limit is not None else "Reduce limit",
                "Use field selection to request specific fields",
                "Add more filters to narrow results",
            ],
        )
    if estimate.exceeds_warning:
        get_logger(__name__).warning(
            "response_near_token_limit",
            estimated_tokens=estimate.estimated_tokens,
            warning_tokens=warning_tokens,
            max_tokens=max_tokens,
        )
    return estimate
