from releasecheck.common.config import KNOWN_CHANNELS, VerifierConfig
from releasecheck.common.errors import (
    ArtifactNotFoundError,
    ConfigurationError,
    EmptyManifestError,
    ParseError,
    TransportError,
    VerificationError,
    VersionMismatchError,
)

__all__ = [
    "KNOWN_CHANNELS",
    "VerifierConfig",
    "ArtifactNotFoundError",
    "ConfigurationError",
    "EmptyManifestError",
    "ParseError",
    "TransportError",
    "VerificationError",
    "VersionMismatchError",
]
