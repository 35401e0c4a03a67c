import hashlib
import hmac
import json


# Same bytes as JSON.stringify: compact, insertion-ordered keys, no NaN.
def canonical_text(value):
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def canonicalize(value):
    return canonical_text(value).encode("utf-8")


def sha256_hex(data):
    if not isinstance(data, (bytes, bytearray)):
        data = canonicalize(data)
    return hashlib.sha256(data).hexdigest()


def hmac_sha256_hex(secret, data):
    if isinstance(secret, str):
        secret = secret.encode("utf-8")
    if not isinstance(data, (bytes, bytearray)):
        data = canonicalize(data)
    return hmac.new(secret, data, hashlib.sha256).hexdigest()
