from __future__ import annotations

import re
import secrets
from typing import Optional

from pastebin.domain.models import STORE_KEY_MAX_LENGTH
from pastebin.repositories.paste_store import KEY_PREFIX


MIN_ID_BYTES = 6
# Largest id whose "paste:<id>" key still fits the store key column.
MAX_ID_BYTES = (STORE_KEY_MAX_LENGTH - len(KEY_PREFIX)) // 2

_PASTE_ID_RE = re.compile(rf"[0-9a-f]{{{MIN_ID_BYTES * 2},{MAX_ID_BYTES * 2}}}")


def clamp_id_bytes(num_bytes: int) -> int:
    return min(MAX_ID_BYTES, max(MIN_ID_BYTES, num_bytes))


def generate_paste_id(num_bytes: int = MIN_ID_BYTES) -> str:
    # 6 random bytes -> 12 hex characters, 48 bits.
    return secrets.token_hex(clamp_id_bytes(num_bytes))


def is_valid_paste_id(paste_id: str) -> bool:
    return _PASTE_ID_RE.fullmatch(paste_id) is not None


def build_paste_url(base_url: str, paste_id: str) -> str:
    return f"{base_url.rstrip('/')}/p/{paste_id}"


def parse_test_now(raw: Optional[str]) -> Optional[int]:
    """Parse an ``X-Test-Now-Ms`` header value; garbage yields ``None``."""
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None
