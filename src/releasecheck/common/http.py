from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from releasecheck import __version__ as RELEASECHECK_VERSION
from releasecheck.common.config import VerifierConfig


USER_AGENT = f"releasecheck/{RELEASECHECK_VERSION}"


def build_session(config: VerifierConfig) -> requests.Session:
    session = requests.Session()
    retry = Retry(
        total=config.max_retries,
        connect=config.max_retries,
        read=config.max_retries,
        status=config.max_retries,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET", "HEAD"}),
        raise_on_status=False,
    )
    # One pooled connection per worker so concurrent checks don't block on the pool.
    adapter = HTTPAdapter(max_retries=retry, pool_maxsize=config.max_workers)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers["User-Agent"] = USER_AGENT
    return session
