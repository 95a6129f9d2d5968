"""
HTTP client for the Personality Insights profile endpoint.
"""

from __future__ import annotations

from typing import Any, Optional

import requests


class AnalysisError(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        method: Optional[str] = None,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_text: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.url = url
        self.status_code = status_code
        self.response_text = response_text


class PersonalityInsightsClient:
    """
    Text in, profile tree out.

    Credentials are only checked when a profile is requested, so the web app
    can start (and serve stored sessions) without them.
    """

    def __init__(
        self,
        url: Optional[str],
        username: Optional[str] = None,
        password: Optional[str] = None,
        *,
        language: str = "en",
        timeout_s: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url.rstrip("/") if url else None
        self.username = username
        self.password = password
        self.language = language
        self.timeout_s = timeout_s
        self._session = session or requests.Session()

    def profile(self, text: str) -> dict[str, Any]:
        if not self.url:
            raise AnalysisError("Personality Insights URL is not configured")
        if not self.username or not self.password:
            raise AnalysisError("Personality Insights credentials are not configured")
        if not text or not text.strip():
            raise AnalysisError("Cannot analyze empty text")

        method = "POST"
        url = f"{self.url}/v2/profile"
        headers = {
            "Content-Type": "text/plain; charset=utf-8",
            "Content-Language": self.language,
            "Accept": "application/json",
        }
        try:
            response = self._session.request(
                method,
                url,
                data=text.encode("utf-8"),
                headers=headers,
                auth=(self.username, self.password),
                timeout=self.timeout_s,
            )
        except requests.RequestException as e:
            raise AnalysisError(f"Failed to call Personality Insights: {e}", method=method, url=url) from e

        if response.status_code >= 400:
            raise AnalysisError(
                f"Personality Insights HTTP {response.status_code}",
                method=method,
                url=url,
                status_code=response.status_code,
                response_text=response.text,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise AnalysisError(
                "Personality Insights returned non-JSON response",
                method=method,
                url=url,
                status_code=response.status_code,
                response_text=response.text,
            ) from e

        if not isinstance(body, dict):
            raise AnalysisError("Personality Insights response must be a JSON object", method=method, url=url)
        return body
