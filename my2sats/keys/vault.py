"""
Password-encrypted keyfile (NIP-49 ncryptsec).

Key derivation is scrypt (N=2^log_n, r=8, p=1) over the NFKC-normalized
password; the secret key is sealed with XChaCha20-Poly1305 using the
key-security byte as associated data. The encoded payload is:

    version (0x02) | log_n | salt (16) | nonce (24) | ksb | ciphertext (48)

bech32-encoded under the ``ncryptsec`` prefix. The keyfile on disk holds that
single string and nothing else.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import stat
import unicodedata
from pathlib import Path

from cryptography.hazmat.primitives.kdf.scrypt import Scrypt
from nacl.bindings import (
    crypto_aead_xchacha20poly1305_ietf_decrypt,
    crypto_aead_xchacha20poly1305_ietf_encrypt,
)
from nacl.exceptions import CryptoError

from my2sats.errors import (
    DecryptionFailed,
    InvalidKeyfileFormat,
    InvalidSecretKey,
    KeyfileNotFound,
    My2SatsError,
    OperationAborted,
)
from my2sats.keys.codec import SECRET_KEY_LENGTH, decode_bech32, encode_bech32
from my2sats.prompt import Prompt

logger = logging.getLogger(__name__)

NCRYPTSEC_PREFIX = "ncryptsec1"
VERSION = 0x02
DEFAULT_LOG_N = 16
MAX_LOG_N = 22
# 0x00 known insecure, 0x01 known secure, 0x02 unknown
KEY_SECURITY_UNKNOWN = 0x02

_SALT_LEN = 16
_NONCE_LEN = 24
_CIPHERTEXT_LEN = SECRET_KEY_LENGTH + 16
_PAYLOAD_LEN = 2 + _SALT_LEN + _NONCE_LEN + 1 + _CIPHERTEXT_LEN


def _derive_key(password: str, salt: bytes, log_n: int) -> bytes:
    normalized = unicodedata.normalize("NFKC", password).encode("utf-8")
    kdf = Scrypt(salt=salt, length=32, n=2**log_n, r=8, p=1)
    return kdf.derive(normalized)


def seal(
    secret_key: bytes,
    password: str,
    *,
    log_n: int = DEFAULT_LOG_N,
    key_security: int = KEY_SECURITY_UNKNOWN,
) -> str:
    """Encrypt a secret key under a password. Returns an ncryptsec string."""
    if len(secret_key) != SECRET_KEY_LENGTH:
        raise InvalidSecretKey(f"Secret key must be {SECRET_KEY_LENGTH} bytes, got {len(secret_key)}")
    if not 1 <= log_n <= MAX_LOG_N:
        raise My2SatsError(f"scrypt cost log_n must be between 1 and {MAX_LOG_N}, got {log_n}")

    salt = secrets.token_bytes(_SALT_LEN)
    nonce = secrets.token_bytes(_NONCE_LEN)
    ad = bytes([key_security])
    sym_key = _derive_key(password, salt, log_n)
    ciphertext = crypto_aead_xchacha20poly1305_ietf_encrypt(secret_key, ad, nonce, sym_key)

    payload = bytes([VERSION, log_n]) + salt + nonce + ad + ciphertext
    return encode_bech32("ncryptsec", payload)


def unseal(ncryptsec: str, password: str) -> bytes:
    """Decrypt an ncryptsec string. Any failure is DecryptionFailed."""
    decoded = decode_bech32(ncryptsec.strip())
    if decoded is None:
        raise DecryptionFailed("Failed to decrypt key. Keyfile is corrupted.")
    hrp, payload = decoded
    if hrp != "ncryptsec" or len(payload) != _PAYLOAD_LEN or payload[0] != VERSION:
        raise DecryptionFailed("Failed to decrypt key. Unsupported or corrupted keyfile.")

    log_n = payload[1]
    if not 1 <= log_n <= MAX_LOG_N:
        raise DecryptionFailed(f"Failed to decrypt key. Unsupported scrypt cost 2^{log_n}.")
    offset = 2
    salt = payload[offset : offset + _SALT_LEN]
    offset += _SALT_LEN
    nonce = payload[offset : offset + _NONCE_LEN]
    offset += _NONCE_LEN
    ad = payload[offset : offset + 1]
    ciphertext = payload[offset + 1 :]

    try:
        sym_key = _derive_key(password, salt, log_n)
        secret_key = crypto_aead_xchacha20poly1305_ietf_decrypt(ciphertext, ad, nonce, sym_key)
    except (CryptoError, ValueError) as e:
        raise DecryptionFailed() from e

    if len(secret_key) != SECRET_KEY_LENGTH:
        raise DecryptionFailed()
    return secret_key


def write_keyfile(path: Path | str, ncryptsec: str) -> Path:
    """Write the sealed key to disk, readable by the owner only."""
    key_path = Path(path)
    key_path.parent.mkdir(parents=True, exist_ok=True)
    key_path.write_text(ncryptsec, encoding="utf-8")
    key_path.chmod(stat.S_IRUSR | stat.S_IWUSR)  # 600
    return key_path


def read_keyfile(path: Path | str) -> str:
    """Read a keyfile and check its prefix before anything is decrypted."""
    key_path = Path(path)
    if not key_path.is_file():
        raise KeyfileNotFound(str(key_path))
    # Prefix is checked on the raw text; only trailing whitespace is tolerated.
    ncryptsec = key_path.read_text(encoding="utf-8")
    if not ncryptsec.startswith(NCRYPTSEC_PREFIX):
        raise InvalidKeyfileFormat()
    return ncryptsec.rstrip()


async def open_keyfile(path: Path | str, prompt: Prompt) -> bytes:
    """Read, prompt for the password, and decrypt the keyfile.

    Raises:
        KeyfileNotFound: nothing at ``path``.
        InvalidKeyfileFormat: the file is not an ncryptsec.
        OperationAborted: the user cancelled the password prompt.
        DecryptionFailed: wrong password or corrupted ciphertext.
    """
    ncryptsec = read_keyfile(path)

    password = await asyncio.to_thread(prompt.ask, "Enter password to decrypt key:")
    if not password:
        raise OperationAborted()

    logger.debug("Decrypting keyfile %s", path)
    return await asyncio.to_thread(unseal, ncryptsec, password)
