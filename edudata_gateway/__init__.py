"""Education Data Gateway: paginated, token-budgeted access to the Education Data API."""
