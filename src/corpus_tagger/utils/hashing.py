"""Hashing utilities.

Documents without an explicit id get the hex SHA-256 of their text, which is
deterministic across machines and stable across reruns.
"""

import hashlib


def sha256_hex(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8", errors="ignore")).hexdigest()
