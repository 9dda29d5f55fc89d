"""HMAC signature verification for webhook bodies.

GitHub signs every delivery with the shared secret configured on the hook and
sends the hex digest in a header prefixed with the algorithm name, for example
``X-Hub-Signature-256: sha256=<64 hex chars>``. Verification always runs over
the raw request bytes, never over re-serialized JSON.

Example:
>>> verifier = SignatureVerifier(SignatureAlgorithm.SHA256)
>>> digest = sign(b"{}", b"secret", SignatureAlgorithm.SHA256)
>>> verifier.verify(b"{}", digest, b"secret")
True

"""

from __future__ import annotations

import binascii
import enum
import hashlib
import hmac

from .errors import MalformedRequestError


class SignatureAlgorithm(enum.StrEnum):
    """Hash functions accepted for webhook signatures.

    ``SHA1`` exists for senders that only emit the legacy
    ``X-Hub-Signature`` header.
    """

    SHA1 = "sha1"
    SHA256 = "sha256"

    @property
    def header(self) -> str:
        """Return the HTTP header GitHub uses for this algorithm."""
        if self is SignatureAlgorithm.SHA1:
            return "X-Hub-Signature"
        return "X-Hub-Signature-256"

    @property
    def prefix(self) -> str:
        """Return the ``<algorithm>=`` prefix of the header value."""
        return f"{self.value}="

    @property
    def digest_size(self) -> int:
        """Return the MAC output length in bytes."""
        return hashlib.new(self.value).digest_size

    @property
    def min_header_length(self) -> int:
        """Return the shortest plausible header value (prefix plus hex digest)."""
        return len(self.prefix) + 2 * self.digest_size


def sign(raw_body: bytes, secret: bytes, algorithm: SignatureAlgorithm) -> str:
    """Return the hex HMAC of *raw_body* keyed with *secret*."""
    return hmac.new(secret, raw_body, algorithm.value).hexdigest()


def verify(
    raw_body: bytes,
    provided_digest_hex: str,
    secret: bytes,
    algorithm: SignatureAlgorithm = SignatureAlgorithm.SHA256,
) -> bool:
    """Return True when *provided_digest_hex* is the HMAC of *raw_body*.

    Parameters
    ----------
    raw_body
        Exact request bytes as received.
    provided_digest_hex
        Hex digest taken from the signature header, without its prefix.
    secret
        Repository-specific shared secret.
    algorithm
        Hash function used for the HMAC.

    Returns
    -------
    bool
        ``False`` for undecodable hex or a digest of the wrong length, without
        running the comparison; otherwise the constant-time comparison result.

    """
    try:
        provided = binascii.unhexlify(provided_digest_hex)
    except (binascii.Error, ValueError):
        return False

    if len(provided) != algorithm.digest_size:
        return False

    expected = hmac.new(secret, raw_body, algorithm.value).digest()
    return hmac.compare_digest(expected, provided)


class SignatureVerifier:
    """Verify webhook signatures with a configured hash function."""

    def __init__(
        self, algorithm: SignatureAlgorithm = SignatureAlgorithm.SHA256
    ) -> None:
        """Bind the verifier to *algorithm*."""
        self.algorithm = algorithm

    @property
    def header(self) -> str:
        """Return the header this verifier reads signatures from."""
        return self.algorithm.header

    def extract_digest(self, header_value: str | None) -> str:
        """Return the hex digest carried by a signature header value.

        Raises
        ------
        MalformedRequestError
            If the header is missing, too short to hold a digest, or does not
            start with the algorithm prefix.

        """
        if not header_value:
            raise MalformedRequestError.missing_header(self.header)
        if len(header_value) < self.algorithm.min_header_length:
            raise MalformedRequestError.short_signature(self.header)
        if not header_value.startswith(self.algorithm.prefix):
            raise MalformedRequestError.wrong_signature_prefix(
                self.header, self.algorithm.prefix
            )
        return header_value[len(self.algorithm.prefix) :]

    def verify(self, raw_body: bytes, provided_digest_hex: str, secret: bytes) -> bool:
        """Verify *raw_body* against *provided_digest_hex* using *secret*."""
        return verify(raw_body, provided_digest_hex, secret, self.algorithm)
