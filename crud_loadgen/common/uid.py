# crud_loadgen/common/uid.py
from __future__ import annotations

import secrets
import time

RANDOM_BYTES = 10


def generate_code() -> str:
    """
    Return a natural-key string for a test row.

    The Unix timestamp (seconds) is concatenated with the hex form of 10
    random bytes from the OS CSPRNG, and the resulting string is hex-encoded
    once more. Only the random part provides collision resistance; codes are
    not checked for duplicates.
    """
    raw = f"{int(time.time())}{secrets.token_bytes(RANDOM_BYTES).hex()}"
    return raw.encode("utf-8").hex()
