"""
GitHub Gist Store
=================

Persists armored envelopes as single-file gists and fetches them back by id.
Every failure, from transport errors to unexpected JSON, surfaces as a
``StoreError``. Nothing is retried.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from gist_configs import GistConfig
from gist_errors import StoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GistRecord:
    """Identity of a stored gist"""
    id: str
    url: str


def _response_text(response: requests.Response) -> str:
    return (response.text or "")[:256]


class GistStore:
    """Minimal client for the GitHub gists API"""

    def __init__(self, config: Optional[GistConfig] = None,
                 session: Optional[requests.Session] = None):
        self.config = config or GistConfig()
        self._session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {'Accept': 'application/vnd.github+json'}
        if self.config.token:
            headers['Authorization'] = f"Bearer {self.config.token}"
        return headers

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            response = self._session.request(
                method, url,
                headers=self._headers(),
                timeout=self.config.timeout_seconds,
                **kwargs
            )
        except requests.RequestException as e:
            raise StoreError(f"gist: {method} {url} failed", cause=e) from e

        if not 200 <= response.status_code < 300:
            raise StoreError(
                f"gist: {method} {url} returned HTTP {response.status_code}: {_response_text(response)}",
                status_code=response.status_code
            )
        return response

    def _json(self, response: requests.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            raise StoreError("gist: response is not valid JSON", cause=e) from e
        if not isinstance(body, dict):
            raise StoreError("gist: unexpected response shape")
        return body

    def create(self, content: str) -> GistRecord:
        """
        Store ``content`` as a new gist.

        Args:
            content: Armored envelope text

        Returns:
            The new gist's id and html url
        """
        payload = {
            'description': self.config.description,
            'public': self.config.public,
            'files': {self.config.gist_filename: {'content': content}},
        }
        url = self.config.api_url.rstrip('/') + '/gists'
        body = self._json(self._request('POST', url, json=payload))

        gist_id = body.get('id')
        html_url = body.get('html_url')
        if not gist_id or not html_url:
            raise StoreError("gist: response is missing id or html_url")

        logger.info(f"Created gist {gist_id} ({len(content)} chars)")
        return GistRecord(id=str(gist_id), url=str(html_url))

    def get(self, gist_id: str) -> str:
        """
        Fetch the envelope text stored in gist ``gist_id``.

        Truncated files are downloaded in full from their raw url.
        """
        url = f"{self.config.api_url.rstrip('/')}/gists/{gist_id}"
        body = self._json(self._request('GET', url))

        files = body.get('files')
        if not files or not isinstance(files, dict):
            raise StoreError("gist: No files found")

        entry = files.get(self.config.gist_filename)
        if not isinstance(entry, dict):
            raise StoreError(f"gist: {self.config.gist_filename} not found in gist {gist_id}")

        if entry.get('truncated'):
            raw_url = entry.get('raw_url')
            if not raw_url:
                raise StoreError("gist: truncated file has no raw_url")
            logger.debug(f"Gist {gist_id} content truncated, downloading {raw_url}")
            return self._request('GET', raw_url).text

        content = entry.get('content')
        if not isinstance(content, str):
            raise StoreError(f"gist: {self.config.gist_filename} has no content")

        logger.info(f"Fetched gist {gist_id} ({len(content)} chars)")
        return content
