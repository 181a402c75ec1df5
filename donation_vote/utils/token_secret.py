import secrets
import hmac
import hashlib

# 16 bytes = 128 bits of entropy
SECRET_BYTES = 16


def generate_secret(nbytes: int = SECRET_BYTES) -> str:
    return secrets.token_hex(nbytes)


def secret_digest(raw_secret: str, key: str) -> str:
    """
    Deterministic digest using HMAC-SHA256 keyed with the app SECRET_KEY.
    Safe to store in DB; raw secret stays with the token holder.
    """
    return hmac.new(key.encode("utf-8"), raw_secret.encode("utf-8"), hashlib.sha256).hexdigest()
