from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed

import requests

from releasecheck.common.config import VerifierConfig
from releasecheck.common.errors import ArtifactNotFoundError, ParseError, TransportError
from releasecheck.common.http import build_session
from releasecheck.common.types import (
    RELEASES_INDEX,
    CheckResult,
    VerificationReport,
    VerificationTarget,
)
from releasecheck.verifier.manifest_service import ManifestService, check_version_agreement
from releasecheck.verifier.plan import build_verification_plan
from releasecheck.verifier.releases_index import delta_target, parse_releases_index


log = logging.getLogger(__name__)


def _raise_for(result: CheckResult) -> None:
    if result.status_code is None:
        raise TransportError(f"{result.message} : {result.url} ({result.error})", url=result.url)
    if result.status_code == 200:
        # Reachable index whose body could not be parsed.
        raise ParseError(f"{result.error} : {result.url}")
    raise ArtifactNotFoundError(result.url, result.message, result.status_code)


class ReleaseVerifier:
    def __init__(self, config: VerifierConfig, session: requests.Session | None = None):
        self.config = config
        self.session = session if session is not None else build_session(config)
        self.manifests = ManifestService(config, session=self.session)

    def _failed(
        self,
        target: VerificationTarget,
        status_code: int | None = None,
        error: str | None = None,
    ) -> CheckResult:
        if error:
            log.info("Check error: %s url: %s", error, target.url)
        elif status_code is not None:
            log.info("HTTP Status code: %s url: %s", status_code, target.url)
        if self.config.warn and not target.required:
            log.warning("  FAILED ... %s : %s", target.failure_message, target.url)
        else:
            log.error("  FAILED ... %s : %s", target.failure_message, target.url)
        return CheckResult(
            url=target.url,
            ok=False,
            message=target.failure_message,
            status_code=status_code,
            error=error,
            kind=target.kind,
            required=target.required,
        )

    @staticmethod
    def _ok(target: VerificationTarget) -> CheckResult:
        log.info("  OK ... %s", target.url)
        return CheckResult(url=target.url, ok=True, message="OK", status_code=200, kind=target.kind)

    def verify_artifact_exists(self, url: str, failure_message: str) -> CheckResult:
        return self._check_exists(VerificationTarget(url=url, failure_message=failure_message))

    def _check_exists(self, target: VerificationTarget) -> CheckResult:
        try:
            resp = self.session.head(target.url, timeout=self.config.timeout, allow_redirects=True)
        except requests.RequestException as exc:
            return self._failed(target, error=str(exc))
        if resp.status_code == 200:
            return self._ok(target)
        return self._failed(target, status_code=resp.status_code)

    def check_releases_index(
        self,
        target: VerificationTarget,
        cancel: threading.Event | None = None,
    ) -> list[CheckResult]:
        """Fetch a ``RELEASES`` index and check the delta package it names."""
        try:
            resp = self.session.get(target.url, timeout=self.config.timeout)
        except requests.RequestException as exc:
            return [self._failed(target, error=str(exc))]
        if resp.status_code != 200:
            return [self._failed(target, status_code=resp.status_code)]

        log.debug("RELEASES index %s:\n%s", target.url, resp.text)
        base = target.url.rsplit("/", 1)[0]
        try:
            entry = parse_releases_index(resp.text)
        except ParseError as exc:
            return [self._failed(target, status_code=resp.status_code, error=str(exc))]

        results = [self._ok(target)]
        log.info(
            "RELEASES names %s (sha1 %s, %s bytes)",
            entry.filename,
            entry.sha1,
            entry.size if entry.size is not None else "?",
        )
        delta = delta_target(base, entry)
        if cancel is not None and cancel.is_set():
            return results
        results.append(self._check_exists(delta))
        return results

    def is_fatal(self, result: CheckResult) -> bool:
        return not result.ok and (result.required or not self.config.warn)

    def _run_target(self, target: VerificationTarget, cancel: threading.Event) -> list[CheckResult]:
        if cancel.is_set():
            return []
        if target.kind == RELEASES_INDEX:
            results = self.check_releases_index(target, cancel)
        else:
            results = [self._check_exists(target)]
        if any(self.is_fatal(r) for r in results):
            cancel.set()
        return results

    def execute_plan(self, plan: tuple[VerificationTarget, ...]) -> tuple[CheckResult, ...]:
        """Run every target on the worker pool and return results in plan order.

        Outside warn mode the first failure stops further checks from being
        issued and is raised once in-flight checks have finished.
        """
        cancel = threading.Event()
        with ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix="releasecheck-check",
        ) as pool:
            futures = [pool.submit(self._run_target, target, cancel) for target in plan]
            first_fatal: CheckResult | None = None
            for future in as_completed(futures):
                if future.cancelled():
                    continue
                fatal = next((r for r in future.result() if self.is_fatal(r)), None)
                if fatal is not None and first_fatal is None:
                    first_fatal = fatal
                    for pending in futures:
                        pending.cancel()

        results: list[CheckResult] = []
        for future in futures:
            if not future.cancelled():
                results.extend(future.result())

        if first_fatal is not None:
            skipped = sum(1 for f in futures if f.cancelled() or not f.result())
            log.error(
                "Verification aborted after %d checks (%d not issued).",
                len(results),
                skipped,
            )
            _raise_for(first_fatal)
        return tuple(results)

    def run(self) -> VerificationReport:
        log.info("[1] Verifying data files have identical most current version numbers ...")
        manifest = self.manifests.fetch_latest_manifest()
        version = check_version_agreement(manifest)
        log.info(
            "OK: %s platforms on channel %s report version %s",
            len(manifest.entries),
            self.config.channel,
            version,
        )

        log.info("[2] Verifying file location and status")
        plan = build_verification_plan(manifest, version, self.config)
        results = self.execute_plan(plan)
        report = VerificationReport(channel=self.config.channel, version=version, results=results)
        if report.succeeded:
            log.info("All %d checks passed for %s %s", len(report.passed), report.channel, report.version)
        else:
            log.warning(
                "%d checks passed, %d failed for %s %s (warn mode)",
                len(report.passed),
                len(report.failed),
                report.channel,
                report.version,
            )
        return report
