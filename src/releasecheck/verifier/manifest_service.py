from __future__ import annotations

import logging

import requests

from releasecheck.common.config import VerifierConfig
from releasecheck.common.errors import (
    EmptyManifestError,
    ParseError,
    TransportError,
    VersionMismatchError,
)
from releasecheck.common.http import build_session
from releasecheck.common.types import Manifest, ManifestEntry


log = logging.getLogger(__name__)


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_manifest(channel: str, data: object) -> Manifest:
    """Turn the ``platform -> {version, url}`` mapping into a Manifest.

    Entry order follows the mapping order of the response body.
    """
    if not isinstance(data, dict):
        raise ParseError(f"Manifest for channel {channel!r} is not a JSON object.")
    entries: list[ManifestEntry] = []
    for platform, item in data.items():
        if not isinstance(item, dict):
            raise ParseError(f"Manifest entry {platform!r} is not an object.")
        entries.append(
            ManifestEntry(
                platform=str(platform),
                version=_optional_str(item.get("version")),
                url=_optional_str(item.get("url")),
            )
        )
    return Manifest(channel=channel, entries=tuple(entries))


def check_version_agreement(manifest: Manifest) -> str:
    if not manifest.entries:
        raise EmptyManifestError(manifest.channel)
    versions = manifest.versions()
    if len(versions) != 1:
        raise VersionMismatchError(versions)
    (version,) = versions
    if version is None:
        # Every entry lacks a version: nothing to agree on.
        raise VersionMismatchError(versions)
    return version


class ManifestService:
    def __init__(self, config: VerifierConfig, session: requests.Session | None = None):
        self.config = config
        self.session = session if session is not None else build_session(config)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.auth_token:
            headers["Authorization"] = f"Bearer {self.config.auth_token}"
        else:
            log.warning("AUTH_TOKEN is not set; requesting manifest without authorization.")
        return headers

    def fetch_latest_manifest(self) -> Manifest:
        url = self.config.manifest_url
        log.info("Fetching manifest from %s", url)
        try:
            resp = self.session.get(url, headers=self._headers(), timeout=self.config.timeout)
        except requests.RequestException as exc:
            raise TransportError(f"Manifest request failed: {exc}", url=url) from exc
        if resp.status_code != 200:
            raise TransportError(
                f"Manifest request returned HTTP {resp.status_code}: {resp.text.strip()}",
                url=url,
                status_code=resp.status_code,
            )
        try:
            data = resp.json()
        except ValueError as exc:
            raise ParseError(f"Manifest response from {url} is not valid JSON.") from exc
        manifest = parse_manifest(self.config.channel, data)
        log.debug("Manifest entries: %s", manifest.entries)
        return manifest
