from __future__ import annotations

from fastapi_users.password import PasswordHelper

password_helper = PasswordHelper()

# Verified against when the username is unknown so both login failures cost
# one hash verification.
DUMMY_PASSWORD_HASH = password_helper.hash("folio-dummy-password")


def hash_password(password: str) -> str:
    return password_helper.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    verified, _ = password_helper.verify_and_update(password, password_hash)
    return verified
