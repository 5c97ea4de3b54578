from __future__ import annotations

from dataclasses import dataclass, field


ARTIFACT = "artifact"
RELEASES_INDEX = "releases-index"


@dataclass(frozen=True)
class ManifestEntry:
    platform: str
    version: str | None
    url: str | None


@dataclass(frozen=True)
class Manifest:
    channel: str
    entries: tuple[ManifestEntry, ...]

    def versions(self) -> set[str | None]:
        return {entry.version for entry in self.entries}


@dataclass(frozen=True)
class VerificationTarget:
    url: str
    failure_message: str
    kind: str = ARTIFACT
    # Required targets abort the run even in warn mode.
    required: bool = False


@dataclass(frozen=True)
class CheckResult:
    url: str
    ok: bool
    message: str
    status_code: int | None = None
    error: str | None = None
    kind: str = ARTIFACT
    required: bool = False


@dataclass(frozen=True)
class VerificationReport:
    channel: str
    version: str
    results: tuple[CheckResult, ...] = field(default_factory=tuple)

    @property
    def passed(self) -> list[CheckResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> list[CheckResult]:
        return [r for r in self.results if not r.ok]

    @property
    def succeeded(self) -> bool:
        return not self.failed
