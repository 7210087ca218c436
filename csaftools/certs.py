"""Loading of client certificates for TLS authentication."""

from __future__ import annotations

from typing import Any

from cryptography import x509
from cryptography.hazmat.primitives import serialization

__all__ = ["load_certificate"]


def _public_der(key: Any) -> bytes:
    return key.public_bytes(
        serialization.Encoding.DER, serialization.PublicFormat.SubjectPublicKeyInfo
    )


def load_certificate(
    cert_file: str | None, key_file: str | None, passphrase: str | None = None
) -> list[tuple[list[x509.Certificate], Any]]:
    """Load a client certificate chain and its private key.

    Returns a list with one (chain, key) pair, or an empty list when
    neither file is given. The key may be encrypted with passphrase.
    """
    if (cert_file is None) != (key_file is None):
        raise ValueError(
            "both client-key and client-cert options must be set for the authentication"
        )
    if cert_file is None or key_file is None:
        return []

    with open(key_file, "rb") as f:
        key_pem = f.read()
    with open(cert_file, "rb") as f:
        cert_pem = f.read()

    password = None if passphrase is None else passphrase.encode()
    key = serialization.load_pem_private_key(key_pem, password=password)
    chain = x509.load_pem_x509_certificates(cert_pem)
    if not chain:
        raise ValueError("failed to find any PEM data in certificate input")
    if _public_der(chain[0].public_key()) != _public_der(key.public_key()):
        raise ValueError("private key does not match public key")
    return [(chain, key)]