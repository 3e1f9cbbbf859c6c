import base64
import hashlib
import hmac
import secrets
from dataclasses import dataclass

from app.core.config import settings

KEY_SCHEME = "ok"


@dataclass(frozen=True)
class ApiKeyParts:
    prefix: str
    plain: str
    hashed: str


def generate_api_key(prefix_len: int = 8) -> ApiKeyParts:
    # ok_<hex prefix>_<secret>; the prefix is stored in clear for lookup
    prefix = secrets.token_hex(prefix_len // 2)
    plain = f"{KEY_SCHEME}_{prefix}_{secrets.token_urlsafe(32)}"
    return ApiKeyParts(prefix=prefix, plain=plain, hashed=hash_api_key(plain))


def key_prefix(plain: str) -> str | None:
    scheme, _, rest = plain.partition("_")
    prefix, _, secret = rest.partition("_")
    if scheme != KEY_SCHEME or not prefix or not secret:
        return None
    return prefix


def hash_api_key(plain: str) -> str:
    salted = (plain + settings.api_key_pepper.get_secret_value()).encode("utf-8")
    return base64.b64encode(hashlib.sha256(salted).digest()).decode("utf-8")


def verify_api_key(plain: str, hashed: str) -> bool:
    return hmac.compare_digest(hash_api_key(plain), hashed)
