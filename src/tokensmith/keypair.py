"""RSA key pair handling."""

from __future__ import annotations

import base64
from datetime import timedelta
from typing import Self

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import (
    dh,
    dsa,
    ec,
    ed448,
    ed25519,
    rsa,
    x448,
    x25519,
)
from cryptography.hazmat.primitives.serialization import (
    BestAvailableEncryption,
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
    load_pem_private_key,
)
from cryptography.x509.oid import NameOID
from safir.datetime import current_datetime

from .models.enums import Algorithm
from .models.jwks import JWK, JWKS
from .util import number_to_base64

__all__ = ["RSAKeyPair", "key_type_name"]

_KEY_TYPES: dict[str, tuple[type, ...]] = {
    "RSA": (rsa.RSAPrivateKey, rsa.RSAPublicKey),
    "DSA": (dsa.DSAPrivateKey, dsa.DSAPublicKey),
    "DH": (dh.DHPrivateKey, dh.DHPublicKey),
    "EC": (ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey),
    "Ed25519": (ed25519.Ed25519PrivateKey, ed25519.Ed25519PublicKey),
    "Ed448": (ed448.Ed448PrivateKey, ed448.Ed448PublicKey),
    "X25519": (x25519.X25519PrivateKey, x25519.X25519PublicKey),
    "X448": (x448.X448PrivateKey, x448.X448PublicKey),
}
"""Private and public key classes for each asymmetric key type."""


def key_type_name(key: object) -> str | None:
    """Return the name of the type of an asymmetric key.

    Parameters
    ----------
    key
        Private or public key object.

    Returns
    -------
    str or None
        Name of the key type, such as ``RSA`` or ``EC``, or `None` if the
        object is not a recognized key.
    """
    for name, classes in _KEY_TYPES.items():
        if isinstance(key, classes):
            return name
    return None


class RSAKeyPair:
    """An RSA key pair with some simple helper functions.

    Notes
    -----
    Created by calling :py:meth:`~RSAKeyPair.generate` or
    :py:meth:`~RSAKeyPair.from_pem` rather than the constructor.
    """

    @classmethod
    def from_pem(cls, pem: bytes, passphrase: str | None = None) -> Self:
        """Import an RSA key pair from a PEM-encoded private key.

        Parameters
        ----------
        pem
            The PEM-encoded key.
        passphrase
            Passphrase protecting the key, if it is encrypted.

        Returns
        -------
        RSAKeyPair
            The corresponding key pair.

        Raises
        ------
        cryptography.exceptions.UnsupportedAlgorithm
            Raised if the provided key is not an RSA private key.
        ValueError
            Raised if the key cannot be decoded or the passphrase is wrong.
        """
        password = passphrase.encode() if passphrase else None
        private_key = load_pem_private_key(pem, password=password)
        if not isinstance(private_key, rsa.RSAPrivateKey):
            raise UnsupportedAlgorithm("Key is not an RSA private key")
        return cls(private_key)

    @classmethod
    def generate(cls, key_size: int = 2048) -> Self:
        """Generate a new RSA key pair.

        Parameters
        ----------
        key_size
            Size of the modulus in bits.

        Returns
        -------
        RSAKeyPair
            Newly-generated key pair.
        """
        private_key = rsa.generate_private_key(
            public_exponent=65537, key_size=key_size
        )
        return cls(private_key)

    def __init__(self, private_key: rsa.RSAPrivateKey) -> None:
        self.private_key = private_key
        self._certificate: x509.Certificate | None = None
        self._private_key_as_pem: bytes | None = None
        self._public_key_as_pem: bytes | None = None

    def certificate(self, common_name: str = "tokensmith") -> x509.Certificate:
        """Return a self-signed certificate for the public key.

        The certificate is created on first use and reused afterwards, so
        ``common_name`` only has an effect on the first call.

        Parameters
        ----------
        common_name
            Subject and issuer common name of the certificate.

        Returns
        -------
        cryptography.x509.Certificate
            Self-signed certificate valid for one year.
        """
        if not self._certificate:
            name = x509.Name(
                [x509.NameAttribute(NameOID.COMMON_NAME, common_name)]
            )
            now = current_datetime()
            self._certificate = (
                x509.CertificateBuilder()
                .subject_name(name)
                .issuer_name(name)
                .public_key(self.private_key.public_key())
                .serial_number(x509.random_serial_number())
                .not_valid_before(now - timedelta(minutes=5))
                .not_valid_after(now + timedelta(days=365))
                .sign(self.private_key, hashes.SHA256())
            )
        return self._certificate

    def certificate_as_x5c(self) -> str:
        """Return the certificate in the form used in the JWK ``x5c`` field.

        Returns
        -------
        str
            Standard base64 encoding (with padding) of the DER certificate.
        """
        der = self.certificate().public_bytes(Encoding.DER)
        return base64.b64encode(der).decode()

    def private_key_as_pem(self, passphrase: str | None = None) -> bytes:
        """Return the serialized private key.

        Parameters
        ----------
        passphrase
            If given, encrypt the serialized key with this passphrase.

        Returns
        -------
        bytes
            Private key encoded using PKCS#8.
        """
        if passphrase:
            encryption = BestAvailableEncryption(passphrase.encode())
            return self.private_key.private_bytes(
                Encoding.PEM, PrivateFormat.PKCS8, encryption
            )
        if not self._private_key_as_pem:
            self._private_key_as_pem = self.private_key.private_bytes(
                Encoding.PEM, PrivateFormat.PKCS8, NoEncryption()
            )
        return self._private_key_as_pem

    def public_key_as_jwks(
        self, kid: str | None = None, algorithm: Algorithm = Algorithm.RS256
    ) -> JWKS:
        """Return the public key in JWKS format.

        Parameters
        ----------
        kid
            The key ID.  If not included, the kid will be omitted, making the
            result invalid JWKS.
        algorithm
            Signing algorithm to advertise for the key.

        Returns
        -------
        JWKS
            The public key in JWKS format, including the certificate chain.
        """
        public_numbers = self.public_numbers()
        jwk = JWK(
            alg=algorithm.value,
            kid=kid,
            kty="RSA",
            use="sig",
            n=number_to_base64(public_numbers.n).decode(),
            e=number_to_base64(public_numbers.e).decode(),
            x5c=[self.certificate_as_x5c()],
        )
        return JWKS(keys=[jwk])

    def public_key_as_pem(self) -> bytes:
        """Return the PEM-encoded public key.

        Returns
        -------
        bytes
            The public key in PEM encoding and SubjectPublicKeyInfo format.
        """
        if not self._public_key_as_pem:
            public_key = self.private_key.public_key()
            self._public_key_as_pem = public_key.public_bytes(
                Encoding.PEM, PublicFormat.SubjectPublicKeyInfo
            )
        return self._public_key_as_pem

    def public_numbers(self) -> rsa.RSAPublicNumbers:
        """Return the public numbers for the key pair.

        Returns
        -------
        cryptography.hazmat.primitives.asymmetric.rsa.RSAPublicNumbers
            The public numbers.
        """
        return self.private_key.public_key().public_numbers()
