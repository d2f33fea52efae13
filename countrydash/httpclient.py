"""HTTP client with a timeout and simple GET and POST helpers."""

from __future__ import annotations

import json
from collections.abc import Mapping

import requests

from countrydash.config import (
    CONTENT_TYPE_JSON,
    ERR_HTTP_GET_FAILED,
    ERR_HTTP_GET_STATUS,
    ERR_HTTP_POST_FAILED,
    ERR_HTTP_POST_MARSHAL,
    ERR_HTTP_POST_STATUS,
    ERR_HTTP_READ_BODY,
    HEADER_CONTENT_TYPE,
)

DEFAULT_TIMEOUT = 10.0


class HttpClientError(Exception):
    """Raised when a request fails or answers with a status other than 200."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class HttpClient:
    """Thin wrapper around a requests session."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout
        self._session = requests.Session()

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def get(self, url: str) -> bytes:
        """Return the body of a GET request that answered 200."""
        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise HttpClientError(ERR_HTTP_GET_FAILED.format(exc)) from exc
        with response:
            if response.status_code != 200:
                raise HttpClientError(
                    ERR_HTTP_GET_STATUS.format(response.status_code), response.status_code
                )
            return self._content(response)

    def get_status_code(self, url: str) -> int:
        """Return only the status code of a GET request."""
        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise HttpClientError(ERR_HTTP_GET_FAILED.format(exc)) from exc
        with response:
            return response.status_code

    def post(self, url: str, body: Mapping[str, str]) -> bytes:
        """POST ``body`` as JSON and return the body of a 200 answer."""
        try:
            payload = json.dumps(dict(body))
        except (TypeError, ValueError) as exc:
            raise HttpClientError(ERR_HTTP_POST_MARSHAL.format(exc)) from exc
        try:
            response = self._session.post(
                url,
                data=payload.encode("utf-8"),
                headers={HEADER_CONTENT_TYPE: CONTENT_TYPE_JSON},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise HttpClientError(ERR_HTTP_POST_FAILED.format(exc)) from exc
        with response:
            if response.status_code != 200:
                raise HttpClientError(
                    ERR_HTTP_POST_STATUS.format(response.status_code), response.status_code
                )
            return self._content(response)

    @staticmethod
    def _content(response: requests.Response) -> bytes:
        try:
            return response.content
        except requests.RequestException as exc:
            raise HttpClientError(ERR_HTTP_READ_BODY.format(exc)) from exc