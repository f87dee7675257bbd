# Used by rate limiting (keys never contain raw identifiers).

import hashlib

def hash_value(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()

def hash_identity(value: str | None) -> str:
    if not value:
        return "anonymous"
    return hash_value(value)
