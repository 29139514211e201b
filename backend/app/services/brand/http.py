"""
Outbound HTTP for brand color resolution.

Thin wrapper over ``requests`` that applies the resolver's user-agent,
optional deadlines and a body size cap, and turns every transport problem
into ``FetchError``. Bodies are streamed so the timeout bounds the whole
request, not just each socket read.
"""
import time
from typing import Optional

import requests
import urllib3
from loguru import logger

from app.config import config
from app.services.reliability import Deadline, DeadlineExceeded, FetchError, effective_timeout

CHUNK_SIZE = 64 * 1024


def _decode(body: bytes, encoding: Optional[str]) -> str:
    try:
        return body.decode(encoding or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")


class HttpFetcher:
    """Performs bounded GET requests with an identifying user-agent."""

    def __init__(self, user_agent: Optional[str] = None):
        self.user_agent = user_agent or config.USER_AGENT

    def _get(self, url: str, operation: str, timeout: float,
             deadline: Optional[Deadline], max_bytes: int):
        """
        GET ``url`` and read its body within ``timeout`` seconds overall.

        Returns:
            Tuple of (response, body bytes); the response is already closed

        Raises:
            DeadlineExceeded: If the deadline runs out before or during the request
            FetchError: On any other failure, including slow or oversize bodies
        """
        timeout = effective_timeout(operation, timeout, deadline)
        expires_at = time.monotonic() + timeout
        try:
            response = requests.get(
                url,
                timeout=timeout,
                headers={"User-Agent": self.user_agent},
                allow_redirects=True,
                stream=True
            )
            try:
                response.raise_for_status()
                body = self._read_body(response, url, expires_at, timeout, deadline, max_bytes)
            finally:
                response.close()
        except requests.Timeout as e:
            raise FetchError(f"Timed out fetching {url} after {timeout:.1f}s") from e
        except requests.HTTPError as e:
            raise FetchError(f"HTTP {e.response.status_code} fetching {url}") from e
        except requests.RequestException as e:
            raise FetchError(f"Request failed for {url}: {e}") from e
        except urllib3.exceptions.HTTPError as e:
            raise FetchError(f"Failed reading body of {url}: {e}") from e

        logger.debug(f"{operation} GET {url} -> {response.status_code} ({len(body)} bytes)")
        return response, body

    def _read_body(self, response: requests.Response, url: str, expires_at: float,
                   timeout: float, deadline: Optional[Deadline], max_bytes: int) -> bytes:
        chunks = []
        size = 0
        while True:
            # read1 makes at most one socket read and returns whatever has arrived
            chunk = response.raw.read1(CHUNK_SIZE, decode_content=True)
            if not chunk:
                break
            size += len(chunk)
            if size > max_bytes:
                raise FetchError(f"Body too large for {url}: more than {max_bytes} bytes")
            if time.monotonic() >= expires_at:
                if deadline is not None and deadline.remaining() <= 0.0:
                    raise DeadlineExceeded(f"Deadline exceeded while reading {url}")
                raise FetchError(f"Timed out reading {url} after {timeout:.1f}s")
            chunks.append(chunk)
        return b"".join(chunks)

    def fetch_text(self, url: str, timeout: Optional[float] = None,
                   deadline: Optional[Deadline] = None,
                   max_bytes: Optional[int] = None) -> str:
        """
        Fetch a page and return its decoded body.

        Raises:
            FetchError: On transport error, timeout, expired deadline, non-2xx
                status or a body larger than ``max_bytes``
        """
        if max_bytes is None:
            max_bytes = config.MAX_PAGE_MB * 1024 * 1024
        response, body = self._get(url, "page_fetch", timeout or config.FETCH_TIMEOUT_S,
                                   deadline, max_bytes)
        return _decode(body, response.encoding)

    def fetch_bytes(self, url: str, timeout: Optional[float] = None,
                    deadline: Optional[Deadline] = None,
                    max_bytes: Optional[int] = None) -> bytes:
        """
        Fetch a binary resource (e.g. a favicon).

        Raises:
            FetchError: On any fetch failure or if the body exceeds ``max_bytes``
        """
        if max_bytes is None:
            max_bytes = config.MAX_IMAGE_MB * 1024 * 1024
        _, body = self._get(url, "image_fetch", timeout or config.IMAGE_TIMEOUT_S,
                            deadline, max_bytes)
        return body
