from __future__ import annotations

from dataclasses import dataclass

from releasecheck.common.errors import ParseError
from releasecheck.common.types import VerificationTarget


@dataclass(frozen=True)
class ReleasesEntry:
    sha1: str
    filename: str
    size: int | None = None


def parse_releases_index(body: str) -> ReleasesEntry:
    """Parse the first line of a Squirrel ``RELEASES`` index.

    Lines are whitespace separated: ``<sha1> <package filename> [<size>]``.
    """
    line = next((ln for ln in str(body or "").splitlines() if ln.strip()), "")
    # Squirrel writes a BOM at the start of the file.
    fields = line.lstrip("\ufeff").split()
    if len(fields) < 2:
        raise ParseError(f"RELEASES line has fewer than 2 fields: {line!r}")
    size: int | None = None
    if len(fields) > 2 and fields[2].isdigit():
        size = int(fields[2])
    return ReleasesEntry(sha1=fields[0], filename=fields[1], size=size)


def delta_target(base: str, entry: ReleasesEntry) -> VerificationTarget:
    filename = entry.filename
    url = f"{base.rstrip('/')}/{filename}"
    return VerificationTarget(
        url=url,
        failure_message=f"Windows update file {filename} is not available at {url}",
    )
