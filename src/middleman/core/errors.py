"""Exception taxonomy for the middleman.

Every error raised while serving a request carries a ``public_message``: the
terse text a caller is allowed to see. The exception's own message holds the
detail and is only ever logged.
"""

DECRYPTION_FAILED = "Decryption failed"
PROCESSING_FAILED = "Failed to process request"
INVALID_RESPONSE = "Invalid response format"
ENCRYPTION_FAILED = "Failed to encrypt response"


class MiddlemanError(Exception):
    public_message = PROCESSING_FAILED


# ================================================================================
#       Envelope
# ================================================================================
class CryptoError(MiddlemanError):
    public_message = DECRYPTION_FAILED


class EnvelopeKeyError(CryptoError):
    """The shared key is not exactly 32 bytes."""


class RandomSourceError(CryptoError):
    """No secure randomness was available for a nonce."""


class DecodeError(CryptoError):
    """The envelope is not valid base64."""


class TruncatedEnvelopeError(CryptoError):
    """The decoded envelope is shorter than a nonce."""


class AuthenticationError(CryptoError):
    """The authentication tag did not verify."""


# ================================================================================
#       Request / backend
# ================================================================================
class TransportError(MiddlemanError):
    # Same caller-visible text as a bad envelope, so the parsing stage stays hidden
    public_message = DECRYPTION_FAILED


class BackendError(MiddlemanError):
    public_message = PROCESSING_FAILED


class BackendUnavailableError(BackendError):
    """Connection refused, timeout or any other transport failure."""


class BackendReplyError(BackendError):
    public_message = INVALID_RESPONSE


class ClientDisconnectedError(MiddlemanError):
    """The inbound client went away while the backend call was in flight."""


# ================================================================================
#       Startup
# ================================================================================
class ConfigError(MiddlemanError):
    """Fatal configuration problem; the service must not start serving."""
