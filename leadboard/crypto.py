import base64
import hashlib
import os

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .errors import StorageError

API_KEY_PREFIX = "lb_sk_"
IV_SIZE = 16


def generate_api_key() -> str:
    """Return a new secret: prefix plus 24 random bytes, url-safe base64 without padding."""
    raw = base64.urlsafe_b64encode(os.urandom(24)).decode("ascii").rstrip("=")
    return API_KEY_PREFIX + raw


def sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def _cipher(secret: str, iv: bytes) -> Cipher:
    key = secret.encode("utf-8")
    if len(key) not in (16, 24, 32):
        raise StorageError("encryption secret must be 16, 24 or 32 bytes")
    return Cipher(algorithms.AES(key), modes.CFB(iv))


def encrypt_value(secret: str, plain: str) -> str:
    """AES-CFB encrypt ``plain``; the hex result is the IV followed by the ciphertext."""
    iv = os.urandom(IV_SIZE)
    encryptor = _cipher(secret, iv).encryptor()
    body = encryptor.update(plain.encode("utf-8")) + encryptor.finalize()
    return (iv + body).hex()


def decrypt_value(secret: str, encrypted_hex: str) -> str:
    try:
        data = bytes.fromhex(encrypted_hex)
    except ValueError as exc:
        raise StorageError("stored key is not valid hex") from exc
    if len(data) < IV_SIZE:
        raise StorageError("ciphertext too short")
    decryptor = _cipher(secret, data[:IV_SIZE]).decryptor()
    plain = decryptor.update(data[IV_SIZE:]) + decryptor.finalize()
    try:
        return plain.decode("utf-8")
    except UnicodeDecodeError as exc:
        # wrong secret, e.g. after rotating it
        raise StorageError("failed to decrypt api key") from exc
