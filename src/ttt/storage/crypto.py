# src/ttt/storage/crypto.py

"""
Encrypted envelope for the task store.

Envelope (JSON):
    version     envelope format, currently 1
    kdf         {"name": "argon2id", "m_cost": KiB, "t_cost": passes, "p_cost": lanes}
    cipher      "xchacha20poly1305"
    salt        base64, 16 random bytes (fresh per save)
    nonce       base64, 24 random bytes (fresh per save)
    ciphertext  base64, AEAD over the plaintext store JSON (no associated data)

Key derivation uses cryptography's Argon2id; the AEAD is libsodium's
XChaCha20-Poly1305 (IETF) through PyNaCl.

Every decryption failure raises the same CryptoError. The specific reason is
logged at DEBUG so a user debugging a file can still find it.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Any

import nacl.utils
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.kdf.argon2 import Argon2id
from nacl.bindings import (
    crypto_aead_xchacha20poly1305_ietf_decrypt,
    crypto_aead_xchacha20poly1305_ietf_encrypt,
)
from nacl.exceptions import CryptoError as NaclCryptoError

from ..errors import CryptoError, ValidationError
from ..tasks.task_models import Store, store_from_dict, store_to_dict

logger = logging.getLogger(__name__)

ENVELOPE_VERSION = 1
KDF_NAME = "argon2id"
CIPHER_NAME = "xchacha20poly1305"
SALT_LEN = 16
NONCE_LEN = 24
KEY_LEN = 32


@dataclass(frozen=True, slots=True)
class KdfParams:
    m_cost: int = 19_456
    t_cost: int = 2
    p_cost: int = 1
    name: str = KDF_NAME


DEFAULT_KDF = KdfParams()


class _Reject(Exception):
    """Internal: carries the concrete reason before it is flattened to CryptoError."""


def _check_passphrase(passphrase: str) -> None:
    if not passphrase or not passphrase.strip():
        raise ValidationError("Passphrase cannot be empty.")


def derive_key(passphrase: str, salt: bytes, kdf: KdfParams) -> bytes:
    return Argon2id(
        salt=salt,
        length=KEY_LEN,
        iterations=kdf.t_cost,
        lanes=kdf.p_cost,
        memory_cost=kdf.m_cost,
    ).derive(passphrase.encode("utf-8"))


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _unb64(raw: Any, label: str) -> bytes:
    if not isinstance(raw, str):
        raise _Reject(f"{label} is not a string")
    try:
        return base64.b64decode(raw.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise _Reject(f"invalid {label} encoding") from exc


def encrypt_store(store: Store, passphrase: str, kdf: KdfParams | None = None) -> str:
    """Serialize and encrypt `store`; returns the pretty-printed envelope JSON."""
    _check_passphrase(passphrase)
    kdf = kdf or DEFAULT_KDF

    plaintext = json.dumps(store_to_dict(store), ensure_ascii=False).encode("utf-8")
    salt = nacl.utils.random(SALT_LEN)
    nonce = nacl.utils.random(NONCE_LEN)
    key = derive_key(passphrase, salt, kdf)
    ciphertext = crypto_aead_xchacha20poly1305_ietf_encrypt(plaintext, None, nonce, key)

    envelope = {
        "version": ENVELOPE_VERSION,
        "kdf": {
            "name": kdf.name,
            "m_cost": kdf.m_cost,
            "t_cost": kdf.t_cost,
            "p_cost": kdf.p_cost,
        },
        "cipher": CIPHER_NAME,
        "salt": _b64(salt),
        "nonce": _b64(nonce),
        "ciphertext": _b64(ciphertext),
    }
    return json.dumps(envelope, indent=2)


def _parse_kdf(raw: Any) -> KdfParams:
    if not isinstance(raw, dict):
        raise _Reject("kdf block missing")
    if raw.get("name") != KDF_NAME:
        raise _Reject(f"unsupported KDF {raw.get('name')!r}")
    try:
        return KdfParams(
            m_cost=int(raw["m_cost"]),
            t_cost=int(raw["t_cost"]),
            p_cost=int(raw["p_cost"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise _Reject("invalid KDF parameters") from exc


def _open_envelope(payload: str, passphrase: str) -> Store:
    try:
        envelope = json.loads(payload)
    except ValueError as exc:
        raise _Reject("envelope is not JSON") from exc
    if not isinstance(envelope, dict):
        raise _Reject("envelope is not an object")

    if envelope.get("version") != ENVELOPE_VERSION:
        raise _Reject(f"unsupported envelope version {envelope.get('version')!r}")
    if envelope.get("cipher") != CIPHER_NAME:
        raise _Reject(f"unsupported cipher {envelope.get('cipher')!r}")
    kdf = _parse_kdf(envelope.get("kdf"))

    salt = _unb64(envelope.get("salt"), "salt")
    nonce = _unb64(envelope.get("nonce"), "nonce")
    ciphertext = _unb64(envelope.get("ciphertext"), "ciphertext")
    if not salt:
        raise _Reject("invalid salt length")
    if len(nonce) != NONCE_LEN:
        raise _Reject("invalid nonce length")

    try:
        key = derive_key(passphrase, salt, kdf)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise _Reject(f"KDF rejected parameters: {exc}") from exc

    try:
        plaintext = crypto_aead_xchacha20poly1305_ietf_decrypt(ciphertext, None, nonce, key)
    except NaclCryptoError as exc:
        raise _Reject("authentication failed") from exc

    try:
        data = json.loads(plaintext.decode("utf-8"))
        return store_from_dict(data)
    except (ValueError, KeyError, TypeError, AttributeError, ValidationError) as exc:
        raise _Reject(f"plaintext is not a valid store: {exc}") from exc


def decrypt_store(payload: str, passphrase: str) -> Store:
    """
    Decrypt an envelope produced by encrypt_store.

    Raises ValidationError for an empty passphrase and CryptoError for
    everything else that goes wrong; never returns partial data.
    """
    _check_passphrase(passphrase)
    try:
        return _open_envelope(payload, passphrase)
    except _Reject as exc:
        logger.debug("Envelope rejected: %s", exc)
        raise CryptoError() from None

