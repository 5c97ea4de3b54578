from __future__ import annotations

import unittest

import requests

from fakes import (
    BASE_LEGACY_URL,
    BASE_URL,
    SAMPLE_MANIFEST,
    FakeResponse,
    FakeSession,
    make_config,
    release_routes,
)
from releasecheck.common.errors import (
    ArtifactNotFoundError,
    ParseError,
    TransportError,
    VersionMismatchError,
)
from releasecheck.verifier.release_verifier import ReleaseVerifier


class VerifyArtifactTests(unittest.TestCase):
    def test_ok_on_200(self) -> None:
        session = FakeSession()
        result = ReleaseVerifier(make_config(), session=session).verify_artifact_exists(
            "https://cdn/a.exe", "a.exe not found"
        )
        self.assertTrue(result.ok)
        self.assertEqual(result.status_code, 200)
        method, url, kwargs = session.calls[0]
        self.assertEqual((method, url), ("HEAD", "https://cdn/a.exe"))
        self.assertTrue(kwargs["allow_redirects"])

    def test_redirect_to_existing_file_is_ok(self) -> None:
        session = FakeSession(
            {
                "https://cdn/latest/Brave.exe": FakeResponse(302, location="https://storage/files/Brave-1.0.0.exe"),
                "https://storage/files/Brave-1.0.0.exe": FakeResponse(200),
            }
        )
        result = ReleaseVerifier(make_config(), session=session).verify_artifact_exists(
            "https://cdn/latest/Brave.exe", "Brave.exe not found"
        )
        self.assertTrue(result.ok)
        self.assertEqual(result.url, "https://cdn/latest/Brave.exe")
        self.assertEqual(
            session.urls("HEAD"),
            ["https://cdn/latest/Brave.exe", "https://storage/files/Brave-1.0.0.exe"],
        )

    def test_redirect_to_missing_file_fails(self) -> None:
        session = FakeSession(
            {
                "https://cdn/latest/Brave.exe": FakeResponse(301, location="https://storage/files/gone.exe"),
                "https://storage/files/gone.exe": FakeResponse(404),
            }
        )
        result = ReleaseVerifier(make_config(), session=session).verify_artifact_exists(
            "https://cdn/latest/Brave.exe", "Brave.exe not found"
        )
        self.assertFalse(result.ok)
        self.assertEqual(result.status_code, 404)
        self.assertEqual(result.message, "Brave.exe not found")

    def test_timeout_is_failed_result(self) -> None:
        session = FakeSession({"https://cdn/a.exe": requests.Timeout("read timed out")})
        result = ReleaseVerifier(make_config(), session=session).verify_artifact_exists(
            "https://cdn/a.exe", "a.exe not found"
        )
        self.assertFalse(result.ok)
        self.assertIsNone(result.status_code)
        self.assertIn("timed out", result.error)


class ReleaseVerifierRunTests(unittest.TestCase):
    def test_all_checks_pass(self) -> None:
        cfg = make_config()
        session = FakeSession(release_routes(cfg, SAMPLE_MANIFEST))
        report = ReleaseVerifier(cfg, session=session).run()

        self.assertTrue(report.succeeded)
        self.assertEqual(report.version, "1.0.0")
        self.assertEqual(len(report.results), 15)
        urls = [r.url for r in report.results]
        self.assertEqual(urls[0], "https://cdn/x/osx/Brave.dmg")
        self.assertEqual(urls[-1], f"{BASE_URL}/release/1.0.0/fedora64/brave-1.0.0.x86_64.rpm")
        self.assertIn(f"{BASE_URL}/release/winx64/1.0.0-full.nupkg", urls)
        self.assertIn(f"{BASE_LEGACY_URL}/winx64/1.0.0-full.nupkg", urls)
        # Each index is followed directly by its delta package.
        idx = urls.index(f"{BASE_URL}/release/winia32/RELEASES")
        self.assertEqual(urls[idx + 1], f"{BASE_URL}/release/winia32/1.0.0-full.nupkg")

    def test_index_entry_is_logged(self) -> None:
        cfg = make_config()
        session = FakeSession(release_routes(cfg, SAMPLE_MANIFEST))
        with self.assertLogs("releasecheck.verifier.release_verifier", level="INFO") as logs:
            ReleaseVerifier(cfg, session=session).run()
        self.assertTrue(
            any("RELEASES names 1.0.0-full.nupkg (sha1 0123456789ABCDEF, 81234567 bytes)" in line for line in logs.output)
        )
        self.assertTrue(any("All 15 checks passed" in line for line in logs.output))

    def test_version_mismatch_stops_before_any_check(self) -> None:
        cfg = make_config()
        manifest = {
            "osx": {"version": "1.0.0", "url": "https://cdn/x/osx/Brave.dmg"},
            "winx64": {"version": "1.0.1", "url": "https://cdn/x/winx64/Brave.exe"},
        }
        session = FakeSession(release_routes(cfg, manifest))
        with self.assertRaises(VersionMismatchError) as ctx:
            ReleaseVerifier(cfg, session=session).run()

        self.assertEqual(ctx.exception.versions, ("1.0.0", "1.0.1"))
        self.assertEqual(session.urls(), [cfg.manifest_url])

    def test_warn_mode_records_failure_and_continues(self) -> None:
        cfg = make_config(warn=True)
        routes = release_routes(cfg, SAMPLE_MANIFEST)
        missing = f"{BASE_URL}/release/1.0.0/winia32/BraveSetup-ia32.exe"
        routes[missing] = FakeResponse(404)
        session = FakeSession(routes)

        with self.assertLogs("releasecheck.verifier.release_verifier", level="WARNING") as logs:
            report = ReleaseVerifier(cfg, session=session).run()

        self.assertFalse(report.succeeded)
        self.assertEqual(len(report.results), 15)
        self.assertEqual([r.url for r in report.failed], [missing])
        self.assertEqual(len(report.passed), 14)
        self.assertEqual(report.failed[0].status_code, 404)
        self.assertTrue(any("FAILED" in line and missing in line for line in logs.output))
        self.assertTrue(any("14 checks passed, 1 failed" in line for line in logs.output))
        self.assertIn(f"{BASE_URL}/release/1.0.0/fedora64/brave-1.0.0.x86_64.rpm", session.urls("HEAD"))

    def test_failure_aborts_outside_warn_mode(self) -> None:
        cfg = make_config(max_workers=1)
        routes = release_routes(cfg, SAMPLE_MANIFEST)
        missing = "https://cdn/x/winx64/Brave.exe"
        routes[missing] = FakeResponse(404)
        session = FakeSession(routes)

        with self.assertRaises(ArtifactNotFoundError) as ctx:
            ReleaseVerifier(cfg, session=session).run()

        self.assertEqual(ctx.exception.url, missing)
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(ctx.exception.failure_message, f"{missing} could not be found")
        # A single worker issues nothing after the failing check.
        self.assertEqual(session.urls()[-1], missing)

    def test_missing_index_is_fatal_even_in_warn_mode(self) -> None:
        cfg = make_config(warn=True, max_workers=1)
        routes = release_routes(cfg, SAMPLE_MANIFEST)
        index = f"{BASE_LEGACY_URL}/winx64/RELEASES"
        routes[index] = FakeResponse(404)
        session = FakeSession(routes)

        with self.assertRaises(ArtifactNotFoundError) as ctx:
            ReleaseVerifier(cfg, session=session).run()

        self.assertEqual(ctx.exception.url, index)
        self.assertEqual(ctx.exception.failure_message, f"{BASE_LEGACY_URL}/winx64 could not be found")

    def test_unparseable_index_raises_parse_error(self) -> None:
        cfg = make_config(max_workers=1)
        routes = release_routes(cfg, SAMPLE_MANIFEST)
        routes[f"{BASE_URL}/release/winx64/RELEASES"] = FakeResponse(200, text="garbage")
        session = FakeSession(routes)

        with self.assertRaises(ParseError):
            ReleaseVerifier(cfg, session=session).run()

    def test_artifact_transport_failure_outside_warn_mode(self) -> None:
        cfg = make_config(max_workers=1)
        routes = release_routes(cfg, SAMPLE_MANIFEST)
        deb = f"{BASE_URL}/release/1.0.0/debian64/brave_1.0.0_amd64.deb"
        routes[deb] = requests.ConnectionError("connection reset")
        session = FakeSession(routes)

        with self.assertRaises(TransportError) as ctx:
            ReleaseVerifier(cfg, session=session).run()
        self.assertEqual(ctx.exception.url, deb)

    def test_manifest_failure_issues_no_checks(self) -> None:
        cfg = make_config()
        session = FakeSession({cfg.manifest_url: FakeResponse(500, text="boom")})
        with self.assertRaises(TransportError):
            ReleaseVerifier(cfg, session=session).run()
        self.assertEqual(session.urls(), [cfg.manifest_url])


if __name__ == "__main__":
    unittest.main()
