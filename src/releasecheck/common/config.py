from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from releasecheck.common.errors import ConfigurationError


KNOWN_CHANNELS: tuple[str, ...] = ("dev", "beta", "release", "nightly", "developer")

DEFAULT_BASE_URL = "https://brave-download.global.ssl.fastly.net/multi-channel/releases"
DEFAULT_BASE_LEGACY_URL = "https://brave-download.global.ssl.fastly.net/releases"

_PROTOCOLS = ("http", "https")


def _env_int(environ: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    raw = str(environ.get(name, "")).strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value


def known_channels(environ: Mapping[str, str]) -> tuple[str, ...]:
    extra = [c.strip() for c in str(environ.get("RELEASECHECK_EXTRA_CHANNELS", "")).split(",")]
    channels = list(KNOWN_CHANNELS)
    for channel in extra:
        if channel and channel not in channels:
            channels.append(channel)
    return tuple(channels)


@dataclass(frozen=True)
class VerifierConfig:
    channel: str
    host: str
    protocol: str = "https"
    port: int | None = None
    warn: bool = False
    auth_token: str | None = None
    base_url: str = DEFAULT_BASE_URL
    base_legacy_url: str = DEFAULT_BASE_LEGACY_URL
    connect_timeout_seconds: int = 10
    read_timeout_seconds: int = 30
    max_workers: int = 8
    max_retries: int = 0
    known_channels: tuple[str, ...] = KNOWN_CHANNELS

    def __post_init__(self) -> None:
        if self.channel not in self.known_channels:
            raise ConfigurationError(
                f"Invalid channel {self.channel!r}; expected one of {{{','.join(self.known_channels)}}}"
            )
        if not str(self.host or "").strip():
            raise ConfigurationError("Host is required.")
        if self.protocol not in _PROTOCOLS:
            raise ConfigurationError(f"Unsupported protocol {self.protocol!r}; expected http or https.")
        if self.port is not None and not 0 < self.port < 65536:
            raise ConfigurationError(f"Port out of range: {self.port}")
        if self.max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1.")

    @property
    def timeout(self) -> tuple[int, int]:
        return (self.connect_timeout_seconds, self.read_timeout_seconds)

    @property
    def api_host(self) -> str:
        if self.port is not None:
            return f"{self.host}:{self.port}"
        return self.host

    @property
    def manifest_url(self) -> str:
        return f"{self.protocol}://{self.api_host}/api/1/releases/{self.channel}/latest"

    @classmethod
    def from_env(
        cls,
        channel: str,
        host: str,
        warn: bool = False,
        protocol: str = "https",
        port: int | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> "VerifierConfig":
        env = os.environ if environ is None else environ
        return cls(
            channel=str(channel or "").strip(),
            host=str(host or "").strip(),
            protocol=str(protocol or "https").strip().lower(),
            port=port,
            warn=bool(warn),
            auth_token=str(env.get("AUTH_TOKEN", "")).strip() or None,
            base_url=(str(env.get("BASE_URL", "")).strip() or DEFAULT_BASE_URL).rstrip("/"),
            base_legacy_url=(str(env.get("BASE_LEGACY_URL", "")).strip() or DEFAULT_BASE_LEGACY_URL).rstrip("/"),
            connect_timeout_seconds=_env_int(env, "RELEASECHECK_CONNECT_TIMEOUT", 10, minimum=1),
            read_timeout_seconds=_env_int(env, "RELEASECHECK_READ_TIMEOUT", 30, minimum=1),
            max_workers=_env_int(env, "RELEASECHECK_MAX_WORKERS", 8, minimum=1),
            max_retries=_env_int(env, "RELEASECHECK_MAX_RETRIES", 0),
            known_channels=known_channels(env),
        )
