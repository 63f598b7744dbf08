"""Common classes for Httpx"""

# I change return type of HTTPX client to Result
# mypy: disable-error-code="override, return-value"
from typing import Iterable

import backoff
from httpx import Client, RequestError


class Result:
    """Result from HTTP request"""

    def __init__(self, retry_codes, response=None, error=None):
        self.response = response
        self.error = error
        self.retry_codes = retry_codes

    def should_backoff(self):
        """True, if the Result can be considered an instability and should be retried"""
        return (
            self.has_dns_error()
            or (self.error is None and self.status_code in self.retry_codes)
            or self.has_error("Server disconnected without sending a response.")
            or self.has_error("timed out")
            or self.has_error("SSL: UNEXPECTED_EOF_WHILE_READING")
        )

    def has_error(self, error_msg: str) -> bool:
        """True, if the request failed and an error with message was returned"""
        return self.error is not None and len(self.error.args) > 0 and any(error_msg in arg for arg in self.error.args)

    def has_dns_error(self):
        """True, if the result failed due to DNS failure"""
        return (
            self.has_error("nodename nor servname provided, or not known")
            or self.has_error("Name or service not known")
            or self.has_error("No address associated with hostname")
        )

    def __getattr__(self, item):
        """Proxies the response, raises the original error if the request failed"""
        if self.response is not None:
            return getattr(self.response, item)
        raise self.error

    def __str__(self):
        if self.error is None:
            return f"Result[status_code={self.response.status_code}]"
        return f"Result[error={self.error}]"


class ClusterHTTPClient(Client):
    """
    Httpx client for talking to the cluster API server which retries unstable requests.
    By default no status code is retried, API server responses (including 503 from proxied services) are
    returned to the caller, only transport failures are retried.
    With `retry=False` every request is sent once, for callers which poll on their own.
    """

    def __init__(self, *, token: str = None, retry_codes: Iterable[int] = None, retry: bool = True, **kwargs):
        self.retry_codes = set(retry_codes or ())
        self.retry = retry
        headers = kwargs.pop("headers", {})
        if token:
            headers["Authorization"] = f"Bearer {token}"
        super().__init__(headers=headers, **kwargs)

    def request(self, method: str, url, **kwargs) -> Result:  # type: ignore
        if self.retry:
            return self._retried_request(method, url, **kwargs)
        return self._single_request(method, url, **kwargs)

    @backoff.on_predicate(backoff.fibo, lambda result: result.should_backoff(), max_tries=8, max_time=60, jitter=None)
    def _retried_request(self, method: str, url, **kwargs) -> Result:
        return self._single_request(method, url, **kwargs)

    def _single_request(self, method: str, url, **kwargs) -> Result:
        try:
            return Result(self.retry_codes, response=super().request(method, url, **kwargs))
        except RequestError as e:
            return Result(self.retry_codes, error=e)
