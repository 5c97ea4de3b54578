from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

from releasecheck import __version__ as RELEASECHECK_VERSION
from releasecheck.common.config import VerifierConfig, known_channels
from releasecheck.common.errors import (
    ArtifactNotFoundError,
    ConfigurationError,
    EmptyManifestError,
    ParseError,
    TransportError,
    VersionMismatchError,
)
from releasecheck.common.logging_utils import configure_logging
from releasecheck.verifier.release_verifier import ReleaseVerifier


log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ARTIFACT_MISSING = 1
EXIT_CONFIG_ERROR = 2
EXIT_MANIFEST_ERROR = 3
EXIT_VERSION_MISMATCH = 4


def build_parser() -> argparse.ArgumentParser:
    channels = known_channels(os.environ)
    parser = argparse.ArgumentParser(description="Verify a published multi-platform release on the CDN.")
    parser.add_argument("--channel", required=True, help=f"Channel identifier {{{','.join(channels)}}}.")
    parser.add_argument("--host", required=True, help="Release service host for the manifest API.")
    parser.add_argument(
        "--warn",
        action="store_true",
        help="Issue a warning (instead of failing) when a file does not exist.",
    )
    parser.add_argument("--protocol", default="https", help="Release service protocol (default: %(default)s).")
    parser.add_argument("--port", type=int, default=None, help="Release service port.")
    parser.add_argument("--log-level", default="INFO", help="Log level.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {RELEASECHECK_VERSION}")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    log_dir = os.environ.get("RELEASECHECK_LOG_DIR", "").strip()
    configure_logging(args.log_level, log_dir=Path(log_dir) if log_dir else None)

    try:
        config = VerifierConfig.from_env(
            channel=args.channel,
            host=args.host,
            warn=args.warn,
            protocol=args.protocol,
            port=args.port,
        )
    except ConfigurationError as exc:
        log.error("Configuration error: %s", exc)
        return EXIT_CONFIG_ERROR

    verifier = ReleaseVerifier(config)
    try:
        report = verifier.run()
    except EmptyManifestError as exc:
        log.error("%s", exc)
        return EXIT_VERSION_MISMATCH
    except VersionMismatchError as exc:
        log.error("%s", exc)
        return EXIT_VERSION_MISMATCH
    except ArtifactNotFoundError as exc:
        log.error("Release verification failed: %s (HTTP %s)", exc, exc.status_code)
        return EXIT_ARTIFACT_MISSING
    except (TransportError, ParseError) as exc:
        log.error("Release verification failed: %s", exc)
        return EXIT_MANIFEST_ERROR

    if report.failed:
        log.warning("Warn mode: %d missing artifacts ignored.", len(report.failed))
    return EXIT_OK
