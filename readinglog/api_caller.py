"""
Resilient API caller with rate limiting and retry logic.
"""

import logging
import time
from typing import Callable, Dict, Optional, Tuple

import requests

from .utils.throttle import RateLimiter


class APICaller:
    """
    Resilient API caller that handles rate limiting, retries, and error handling.

    Never raises for network problems: every outcome is reported through the
    ``(success, status_code, data)`` tuple.
    """

    def __init__(
        self,
        rate_limit: float = 1.0,
        max_retries: int = 3,
        timeout: float = 10,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.rate_limiter = RateLimiter(rate_limit, sleep=sleep)
        self.max_retries = max_retries
        self.timeout = timeout
        self.session = session or requests.Session()
        self._sleep = sleep
        self.logger = logging.getLogger(self.__class__.__name__)

    def get(self, url: str, params: Optional[Dict] = None) -> Tuple[bool, int, Optional[Dict]]:
        """
        Make HTTP GET request with retries and exponential backoff.

        Returns:
            (success: bool, status_code: int, response_data: Optional[Dict])
        """
        for attempt in range(self.max_retries):
            self.rate_limiter.wait()

            try:
                response = self.session.get(url, params=params, timeout=self.timeout)

                # Success cases
                if response.status_code == 200:
                    try:
                        return True, response.status_code, response.json()
                    except ValueError:
                        self.logger.warning(f"Invalid JSON response from {url}")
                        return False, response.status_code, None

                # Client errors (4xx) - don't retry
                elif 400 <= response.status_code < 500:
                    self.logger.warning(f"Client error {response.status_code} for {url}")
                    return False, response.status_code, None

                # Server errors (5xx) - retry
                elif response.status_code >= 500:
                    self.logger.warning(f"Server error {response.status_code} for {url}, attempt {attempt + 1}")
                    if attempt < self.max_retries - 1:
                        self._backoff_sleep(attempt)
                        continue
                    return False, response.status_code, None

                else:
                    self.logger.warning(f"Unexpected status {response.status_code} for {url}")
                    return False, response.status_code, None

            except requests.exceptions.Timeout:
                self.logger.warning(f"Timeout for {url}, attempt {attempt + 1}")
                if attempt < self.max_retries - 1:
                    self._backoff_sleep(attempt)
                    continue
                return False, 0, None

            except requests.exceptions.RequestException as e:
                self.logger.error(f"Request failed for {url}: {e}")
                if attempt < self.max_retries - 1:
                    self._backoff_sleep(attempt)
                    continue
                return False, 0, None

        return False, 0, None

    def _backoff_sleep(self, attempt: int) -> None:
        """Sleep with exponential backoff"""
        sleep_time = 2 ** attempt  # 1s, 2s, 4s
        self.logger.info(f"Backing off for {sleep_time}s")
        self._sleep(sleep_time)
