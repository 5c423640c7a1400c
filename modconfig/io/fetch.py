# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Reading config documents from disk or over HTTP(S).

Deployment config sources live either next to the application (a file path)
or on a web server (an http:// or https:// URL). This module reads either
kind of location as text and parses it as YAML (JSON documents parse too,
JSON being a subset of YAML).

Key Features:

- **Retry Logic with Exponential Backoff** - Automatically retries on transient failures (429, 500, 502, 503, 504) with exponential backoff. Configurable via urllib3.util.Retry.
- **Safe YAML** - Documents are parsed with yaml.safe_load; no arbitrary object construction.

Example:
Load a document:

    >>> from modconfig.io import load_document
    >>> data = load_document("https://config.example.com/config.yaml")
    >>> data = load_document("./config/deployment.yaml")

Notes:
- Timeouts are per-request, not total transfer time
- All HTTP and YAML errors are chained for better debugging
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
import yaml

DEFAULT_TIMEOUT = 30


def is_url(location: str) -> bool:
    """True for http:// and https:// locations."""
    return urlparse(location).scheme in ("http", "https")


def make_session() -> requests.Session:
    """
    Create a requests.Session with sane retry/backoff defaults.

    - Retries on common transient status codes.
    - Applies exponential backoff.
    - Sets a helpful User-Agent to avoid being blocked.
    """
    s = requests.Session()
    retries = Retry(
        total=5,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
        raise_on_status=False,
    )
    s.headers.update({"User-Agent": "modconfig/0.1"})
    s.mount("http://", HTTPAdapter(max_retries=retries))
    s.mount("https://", HTTPAdapter(max_retries=retries))
    return s


def fetch_text(url: str, *, timeout: int = DEFAULT_TIMEOUT) -> str:
    """GET ``url`` and return the body as text.

    Raises:
        requests.HTTPError: For non-2xx responses (after retries).
        requests.RequestException: For connection problems.
    """
    with make_session() as session:
        resp = session.get(url, allow_redirects=True, timeout=timeout)
        try:
            resp.raise_for_status()
        except requests.HTTPError as err:
            raise requests.HTTPError(f"fetch failed for {url}: {err}") from err
        return resp.text


def read_location(location: str, *, timeout: int = DEFAULT_TIMEOUT) -> str:
    """Read a file path or URL as text."""
    if is_url(location):
        return fetch_text(location, timeout=timeout)
    return Path(location).read_text(encoding="utf-8")


def load_document(location: str, *, timeout: int = DEFAULT_TIMEOUT) -> Any:
    """Read and YAML-parse the document at ``location``.

    Raises:
        OSError: If a file location cannot be read.
        requests.RequestException: If a URL location cannot be fetched.
        yaml.YAMLError: If the document is not valid YAML/JSON.
    """
    return yaml.safe_load(read_location(location, timeout=timeout))
