from __future__ import annotations

from typing import Iterable


class VerificationError(Exception):
    """Base for every failure that stops a release verification run."""


class ConfigurationError(VerificationError, ValueError):
    pass


class ParseError(VerificationError, ValueError):
    pass


class TransportError(VerificationError):
    def __init__(self, message: str, url: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class EmptyManifestError(VerificationError):
    def __init__(self, channel: str):
        super().__init__(f"Manifest for channel {channel!r} has no platform entries.")
        self.channel = channel


class VersionMismatchError(VerificationError):
    def __init__(self, versions: Iterable[str | None]):
        # A missing version is its own distinct value; sort it last.
        distinct = sorted(set(versions), key=lambda v: (v is None, v or ""))
        self.versions: tuple[str | None, ...] = tuple(distinct)
        shown = ", ".join("<missing>" if v is None else v for v in self.versions)
        super().__init__(f"Multiple most recent versions: {shown}")


class ArtifactNotFoundError(VerificationError):
    def __init__(self, url: str, failure_message: str, status_code: int | None = None):
        super().__init__(f"{failure_message} : {url}")
        self.url = url
        self.failure_message = failure_message
        self.status_code = status_code
