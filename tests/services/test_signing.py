import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519

from wevote.services.ballots import cast_vote
from wevote.services.signing import (
    NullSigner,
    PemKeySigner,
    get_signer,
    load_public_key,
    verify_signature,
)


def _private_pem(key):
    return key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )


def test_configured_ec_key_is_loaded(app, tmp_path):
    key_path = tmp_path / "signing.pem"
    key_path.write_bytes(_private_pem(ec.generate_private_key(ec.SECP256R1())))
    app.config["SIGNING_KEY_PATH"] = str(key_path)

    signer = get_signer()

    assert isinstance(signer, PemKeySigner)
    assert get_signer() is signer


@pytest.mark.parametrize("key_file", ["missing", "garbage", "ed25519"])
def test_unusable_key_falls_back_to_unsigned(app, tmp_path, key_file):
    key_path = tmp_path / "signing.pem"
    if key_file == "garbage":
        key_path.write_bytes(b"not a pem file")
    elif key_file == "ed25519":
        key_path.write_bytes(_private_pem(ed25519.Ed25519PrivateKey.generate()))
    app.config["SIGNING_KEY_PATH"] = str(key_path)

    assert isinstance(get_signer(), NullSigner)


def test_missing_key_file_does_not_block_votes(app, tmp_path, db_session, voters, ballot_factory):
    app.config["SIGNING_KEY_PATH"] = str(tmp_path / "absent.pem")
    ballot = ballot_factory()

    receipt = cast_vote(voters[0], ballot.ballot_id, {"choice": "A"})

    assert receipt["receipt"].startswith("WeVote-RECEIPT-")


def test_verify_signature_rejects_malformed_signatures():
    signer = PemKeySigner(ec.generate_private_key(ec.SECP256R1()))
    public_key = load_public_key(signer.public_key_pem())
    good = signer.sign(b"data")

    assert verify_signature(public_key, b"data", good)
    assert not verify_signature(public_key, b"data", "abc")
    assert not verify_signature(public_key, b"data", {"algorithm": good["algorithm"]})
    assert not verify_signature(
        public_key, b"data", {**good, "signatureBase64": "%%not-base64%%"}
    )


def test_load_public_key_requires_ec_key():
    ed_public = ed25519.Ed25519PrivateKey.generate().public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )

    with pytest.raises(ValueError):
        load_public_key(ed_public)
