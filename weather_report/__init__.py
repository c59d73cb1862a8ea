"""Single-city weather reporter with a file-backed, TTL-bound result cache."""
