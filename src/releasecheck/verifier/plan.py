from __future__ import annotations

from urllib.parse import urlparse, urlunparse

from releasecheck.common.config import VerifierConfig
from releasecheck.common.types import RELEASES_INDEX, Manifest, VerificationTarget


MACOS_PATH_MARKER = "osx"

WINDOWS_INSTALLERS: tuple[tuple[str, str], ...] = (
    ("winx64", "BraveSetup-x64.exe"),
    ("winia32", "BraveSetup-ia32.exe"),
)


def is_macos_url(url: str) -> bool:
    return MACOS_PATH_MARKER in urlparse(url).path.split("/")


def dmg_url(url: str, version: str) -> str:
    parsed = urlparse(url)
    directory = parsed.path.rsplit("/", 1)[0]
    return urlunparse((parsed.scheme, parsed.netloc, f"{directory}/Brave-{version}.dmg", "", "", ""))


def releases_index_target(base: str) -> VerificationTarget:
    return VerificationTarget(
        url=f"{base}/RELEASES",
        failure_message=f"{base} could not be found",
        kind=RELEASES_INDEX,
        required=True,
    )


def _manifest_targets(manifest: Manifest, version: str) -> list[VerificationTarget]:
    targets: list[VerificationTarget] = []
    for entry in manifest.entries:
        if not (entry.url and entry.version):
            continue
        targets.append(VerificationTarget(url=entry.url, failure_message=f"{entry.url} could not be found"))
        if is_macos_url(entry.url):
            targets.append(VerificationTarget(url=dmg_url(entry.url, version), failure_message="Brave dmg not found"))
    return targets


def build_verification_plan(
    manifest: Manifest,
    version: str,
    config: VerifierConfig,
) -> tuple[VerificationTarget, ...]:
    """Expand an agreed release version into the ordered list of CDN checks."""
    channel_base = f"{config.base_url}/{config.channel}"
    versioned_base = f"{channel_base}/{version}"

    targets = _manifest_targets(manifest, version)

    for platform, _ in WINDOWS_INSTALLERS:
        targets.append(releases_index_target(f"{channel_base}/{platform}"))

    for platform, installer in WINDOWS_INSTALLERS:
        targets.append(
            VerificationTarget(
                url=f"{channel_base}/{platform}/{installer}",
                failure_message=f"{installer} not found",
            )
        )

    targets.append(releases_index_target(f"{config.base_legacy_url}/winx64"))

    for platform, installer in WINDOWS_INSTALLERS:
        targets.append(
            VerificationTarget(
                url=f"{versioned_base}/{platform}/{installer}",
                failure_message=f"Versioned {installer} not found for {platform} version {version}",
            )
        )

    targets.append(
        VerificationTarget(
            url=f"{versioned_base}/debian64/brave_{version}_amd64.deb",
            failure_message=f"debian file not found for version {version}",
        )
    )
    targets.append(
        VerificationTarget(
            url=f"{versioned_base}/fedora64/brave-{version}.x86_64.rpm",
            failure_message=f"fedora file not found for version {version}",
        )
    )
    return tuple(targets)
