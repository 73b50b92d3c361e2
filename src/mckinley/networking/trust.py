"""SSL certificate pinning.

The pinned certificate is read once when the client is built. Every TLS
handshake first runs the normal chain and hostname evaluation; once that
succeeds the leaf certificate presented by the server is compared byte for
byte with the pinned one. Anything other than an exact match cancels the
handshake, which the transport reports as a connection error.
"""

import hmac
import ssl
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from mckinley.shared.exceptions import PinnedCertificateError
from mckinley.shared.logging import get_logger

logger = get_logger(__name__)

PEM_MARKER = b"-----BEGIN CERTIFICATE-----"


class TrustDecision(str, Enum):
    """Outcome of a server-trust evaluation."""

    ACCEPT = "accept"
    CANCEL = "cancel"


@dataclass(frozen=True)
class PinnedCertificate:
    """DER image of the bundled certificate; ``der`` is None when absent."""

    der: bytes | None
    source: str | None = None

    @classmethod
    def load(cls, path: Path | None) -> "PinnedCertificate":
        """Load a DER (``.cer``) or PEM certificate.

        A missing file is not an error here: it yields an empty pin and every
        handshake is cancelled.

        Raises:
            PinnedCertificateError: If the file exists but cannot be read or parsed
        """
        if path is None or not path.is_file():
            logger.warning("pinned_certificate_missing", path=str(path) if path else None)
            return cls(der=None, source=str(path) if path else None)

        try:
            data = path.read_bytes()
        except OSError as e:
            raise PinnedCertificateError(str(path), e.strerror or str(e)) from e

        if data.lstrip().startswith(PEM_MARKER):
            try:
                data = ssl.PEM_cert_to_DER_cert(data.decode("ascii"))
            except (UnicodeDecodeError, ValueError) as e:
                raise PinnedCertificateError(str(path), f"invalid PEM: {e}") from e

        if not data:
            raise PinnedCertificateError(str(path), "file is empty")

        logger.info("pinned_certificate_loaded", path=str(path), size=len(data))
        return cls(der=data, source=str(path))


class TrustVerifier:
    """Accepts a TLS connection only if the leaf certificate matches the pin."""

    def __init__(self, pinned: PinnedCertificate) -> None:
        self.pinned = pinned

    def evaluate(self, leaf_der: bytes | None) -> TrustDecision:
        """Compare the server's leaf certificate with the pinned certificate."""
        if self.pinned.der is None or not leaf_der:
            return TrustDecision.CANCEL
        if hmac.compare_digest(leaf_der, self.pinned.der):
            return TrustDecision.ACCEPT
        return TrustDecision.CANCEL

    def check_handshake(self, leaf_der: bytes | None, server_hostname: str | None) -> None:
        """Cancel the handshake unless the pin matches.

        Raises:
            ssl.SSLCertVerificationError: If the certificate is not the pinned one
        """
        if self.evaluate(leaf_der) is TrustDecision.ACCEPT:
            return
        logger.warning(
            "ssl_pinning_failed",
            server_hostname=server_hostname,
            pinned_certificate=self.pinned.source,
            has_pin=self.pinned.der is not None,
        )
        raise ssl.SSLCertVerificationError(
            ssl.SSL_ERROR_SSL, f"certificate pinning failed for {server_hostname}"
        )

    def ssl_context(self) -> ssl.SSLContext:
        """SSL context with default verification plus the pin check.

        Raises:
            PinnedCertificateError: If the pinned bytes are not a certificate
        """
        context = ssl.create_default_context()
        if self.pinned.der is not None:
            # A self-signed pinned certificate must still pass chain evaluation
            try:
                context.load_verify_locations(cadata=self.pinned.der)
            except ssl.SSLError as e:
                raise PinnedCertificateError(str(self.pinned.source), f"not a certificate: {e}") from e
        context.sslobject_class = _pinned_ssl_object_class(self)
        context.sslsocket_class = _pinned_ssl_socket_class(self)
        return context


def _pinned_ssl_object_class(verifier: TrustVerifier) -> type[ssl.SSLObject]:
    # Used by asyncio/anyio TLS streams (memory BIO)
    class PinnedSSLObject(ssl.SSLObject):
        def do_handshake(self) -> None:
            super().do_handshake()
            verifier.check_handshake(self.getpeercert(binary_form=True), self.server_hostname)

    return PinnedSSLObject


def _pinned_ssl_socket_class(verifier: TrustVerifier) -> type[ssl.SSLSocket]:
    # Used by blocking sockets
    class PinnedSSLSocket(ssl.SSLSocket):
        def do_handshake(self, block: bool = False) -> None:
            super().do_handshake(block)
            verifier.check_handshake(self.getpeercert(binary_form=True), self.server_hostname)

    return PinnedSSLSocket
