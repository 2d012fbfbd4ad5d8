from __future__ import annotations

import secrets


def generate_secure_token(nbytes: int = 16) -> str:
    # 128 bits default, hex encoded
    return secrets.token_hex(nbytes)
