"""Generate a structurally valid sample keybox with fresh keys.

Used for local testing of imports; the engine itself never verifies key or
certificate material.
"""
from __future__ import annotations

import datetime
from xml.sax.saxutils import quoteattr

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.x509.oid import NameOID


def _private_pem(key) -> str:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


def _self_signed_pem(key, common_name: str) -> str:
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + datetime.timedelta(days=365))
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM).decode()


def _key_block(algorithm: str, key, common_name: str) -> str:
    return (
        f"<Key algorithm={quoteattr(algorithm)}>\n"
        f"<PrivateKey format=\"pem\">\n{_private_pem(key)}</PrivateKey>\n"
        "<CertificateChain>\n"
        "<NumberOfCertificates>1</NumberOfCertificates>\n"
        f"<Certificate format=\"pem\">\n{_self_signed_pem(key, common_name)}</Certificate>\n"
        "</CertificateChain>\n"
        "</Key>\n"
    )


def build_sample_keybox(device_id: str = "sample-device") -> str:
    ec_key = ec.generate_private_key(ec.SECP256R1())
    rsa_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return (
        "<?xml version=\"1.0\"?>\n"
        "<AndroidAttestation>\n"
        "<NumberOfKeyboxes>1</NumberOfKeyboxes>\n"
        f"<Keybox DeviceID={quoteattr(device_id)}>\n"
        + _key_block("ecdsa", ec_key, f"{device_id} ECDSA")
        + _key_block("rsa", rsa_key, f"{device_id} RSA")
        + "</Keybox>\n"
        "</AndroidAttestation>\n"
    )
