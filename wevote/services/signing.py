import base64

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from flask import current_app

SIGNING_ALGORITHM = "EC_SIGN_P256_SHA256"


class NullSigner:
    def sign(self, data):
        return None


class PemKeySigner:
    def __init__(self, private_key):
        if not isinstance(private_key, ec.EllipticCurvePrivateKey):
            raise TypeError("Signing key must be an EC private key")
        self.private_key = private_key

    @classmethod
    def from_file(cls, path, password=None):
        with open(path, "rb") as handle:
            key = serialization.load_pem_private_key(handle.read(), password=password)
        return cls(key)

    def public_key_pem(self):
        return self.private_key.public_key().public_bytes(
            serialization.Encoding.PEM,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )

    def sign(self, data):
        signature = self.private_key.sign(bytes(data), ec.ECDSA(hashes.SHA256()))
        return {
            "signatureBase64": base64.b64encode(signature).decode("ascii"),
            "algorithm": SIGNING_ALGORITHM,
        }


def get_signer():
    signer = current_app.extensions.get("wevote_signer")
    if signer is not None:
        return signer

    signer = NullSigner()
    key_path = current_app.config.get("SIGNING_KEY_PATH")
    if key_path:
        try:
            signer = PemKeySigner.from_file(key_path)
        except (OSError, ValueError, TypeError) as exc:
            current_app.logger.warning(
                "Signing key %s unusable, continuing unsigned: %s", key_path, exc
            )
    current_app.extensions["wevote_signer"] = signer
    return signer


def try_sign(signer, data):
    if signer is None:
        return None
    try:
        return signer.sign(data)
    except Exception as exc:
        current_app.logger.warning("Signing failed, continuing without signature: %s", exc)
        return None


def load_public_key(public_key_pem):
    public_key = serialization.load_pem_public_key(public_key_pem)
    if not isinstance(public_key, ec.EllipticCurvePublicKey):
        raise ValueError("Public key must be an EC key")
    return public_key


def verify_signature(public_key, data, signature):
    if not isinstance(signature, dict) or signature.get("algorithm") != SIGNING_ALGORITHM:
        return False
    encoded = signature.get("signatureBase64")
    if not isinstance(encoded, str):
        return False
    if isinstance(public_key, (bytes, str)):
        public_key = load_public_key(
            public_key.encode("ascii") if isinstance(public_key, str) else public_key
        )
    try:
        public_key.verify(
            base64.b64decode(encoded),
            bytes(data),
            ec.ECDSA(hashes.SHA256()),
        )
    except (InvalidSignature, ValueError):
        return False
    return True
