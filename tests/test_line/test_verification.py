"""Tests for LINE signature verification."""

import pytest

from expense_bot.line.verification import VerificationResult, verify_signature

SECRET = "channel-secret"
BODY = '{"destination":"U1","events":[{"type":"message","message":{"type":"text","text":"ค่าไฟ 500 บาท"}}]}'.encode()


def test_valid_signature_is_authentic(signer):
    """A signature computed with the channel secret over the exact body is accepted."""
    assert verify_signature(BODY, SECRET, signer(BODY, SECRET)) is VerificationResult.AUTHENTIC


def test_single_flipped_body_byte_is_rejected(signer):
    """Changing one byte of the body invalidates the signature."""
    signature = signer(BODY, SECRET)
    tampered = bytearray(BODY)
    tampered[2] ^= 0x01
    assert verify_signature(bytes(tampered), SECRET, signature) is VerificationResult.REJECTED


def test_wrong_secret_is_rejected(signer):
    """A signature made with another secret is rejected."""
    assert verify_signature(BODY, SECRET, signer(BODY, "other")) is VerificationResult.REJECTED


def test_tampered_signature_is_rejected(signer):
    """A modified signature string is rejected."""
    signature = signer(BODY, SECRET)
    tampered = ("A" if signature[0] != "A" else "B") + signature[1:]
    assert verify_signature(BODY, SECRET, tampered) is VerificationResult.REJECTED


@pytest.mark.parametrize("signature", [None, ""])
def test_missing_signature_is_rejected(signature):
    """No signature header means rejection, whatever the body."""
    assert verify_signature(BODY, SECRET, signature) is VerificationResult.REJECTED


def test_empty_secret_is_rejected(signer):
    """Verification never passes without a configured secret."""
    assert verify_signature(BODY, "", signer(BODY, "")) is VerificationResult.REJECTED


def test_empty_body_with_matching_signature_is_authentic(signer):
    """The empty body is signed like any other."""
    assert verify_signature(b"", SECRET, signer(b"", SECRET)) is VerificationResult.AUTHENTIC


def test_non_utf8_body_is_rejected(signer):
    """Bodies that are not UTF-8 cannot be a LINE webhook."""
    body = b"\xff\xfe\x00"
    assert verify_signature(body, SECRET, signer(body, SECRET)) is VerificationResult.REJECTED
