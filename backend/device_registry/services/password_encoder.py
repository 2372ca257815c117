"""Password Encoder — turns pwd-plain secrets into hashes before storage.

Invariants:
    - Hashed secrets (pwd-hash set) pass through unchanged
    - Encoded secrets carry pwd-hash and hash-function, never pwd-plain
    - bcrypt: pwd-hash is the modular crypt string, salt is embedded, no salt field
    - sha-256/sha-512: hash = base64(H(salt || utf8(password))), salt is
      16 random bytes, base64 encoded
"""

import base64
import hashlib
import os

import bcrypt

from device_registry.core.domain_types import HashFunction
from device_registry.schemas.credentials import (
    CommonCredential,
    PasswordCredential,
    PasswordSecret,
)

SALT_LENGTH = 16
DEFAULT_BCRYPT_ROUNDS = 10

_HASHLIB_NAMES = {
    HashFunction.SHA_256: "sha256",
    HashFunction.SHA_512: "sha512",
}


def hash_password(
    password: str, salt: bytes, hash_function: HashFunction,
) -> str:
    digest = hashlib.new(_HASHLIB_NAMES[hash_function], salt + password.encode("utf-8"))
    return base64.b64encode(digest.digest()).decode("ascii")


def bcrypt_hash(password: str, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    """Hash with bcrypt; the salt travels inside the returned string."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")


def matches(password: str, secret: PasswordSecret) -> bool:
    """Check a plain password against a stored hashed-password secret."""
    if not secret.password_hash or secret.hash_function is None:
        return False
    if secret.hash_function is HashFunction.BCRYPT:
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"), secret.password_hash.encode("utf-8"),
            )
        except ValueError:
            return False
    salt = base64.b64decode(secret.salt) if secret.salt else b""
    return hash_password(password, salt, secret.hash_function) == secret.password_hash


def encode_secret(
    secret: PasswordSecret,
    hash_function: HashFunction,
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS,
) -> PasswordSecret:
    if secret.password_plain is None:
        return secret
    if hash_function is HashFunction.BCRYPT:
        return secret.model_copy(update={
            "password_plain": None,
            "password_hash": bcrypt_hash(secret.password_plain, bcrypt_rounds),
            "hash_function": hash_function,
        })
    salt = os.urandom(SALT_LENGTH)
    return secret.model_copy(update={
        "password_plain": None,
        "password_hash": hash_password(secret.password_plain, salt, hash_function),
        "salt": base64.b64encode(salt).decode("ascii"),
        "hash_function": hash_function,
    })


def encode_plain_passwords(
    credentials: list[CommonCredential],
    hash_function: HashFunction,
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS,
) -> list[CommonCredential]:
    """Copies of the credentials with every plain password hashed."""
    return [
        c.model_copy(update={
            "secrets": [encode_secret(s, hash_function, bcrypt_rounds) for s in c.secrets],
        })
        if isinstance(c, PasswordCredential) else c
        for c in credentials
    ]
