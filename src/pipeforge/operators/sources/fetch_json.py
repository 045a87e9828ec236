"""fetch-json: GET a JSON API."""

from __future__ import annotations

from typing import Any

import httpx

from pipeforge.contracts.errors import FetchError
from pipeforge.contracts.schema import ExtractedSchema
from pipeforge.operators.sources.http import FetchConfig, FetchOperatorBase


def _require_json(response: httpx.Response) -> None:
    content_type = response.headers.get("content-type", "")
    if "application/json" not in content_type:
        raise FetchError(
            f"Invalid response: Expected JSON but received {content_type or 'unknown'}",
            status_code=response.status_code,
        )


class FetchJSONOperator(FetchOperatorBase[FetchConfig]):
    """Returns the parsed JSON body.

    The output schema is only known once data has been fetched, so
    get_output_schema returns None and the editor previews instead.
    """

    type = "fetch-json"
    description = "Fetch and parse JSON data from a URL"
    config_model = FetchConfig
    accept = "application/json"

    def parse_response(self, response: httpx.Response, config: FetchConfig) -> Any:
        _require_json(response)
        try:
            return response.json()
        except ValueError as e:
            raise FetchError(f"{self.failure_prefix}: {e}", status_code=response.status_code) from e

    def check_error_response(self, response: httpx.Response, config: FetchConfig) -> None:
        _require_json(response)

    def status_error(self, status: int, reason: str, url: str) -> FetchError:
        retryable = status == 429 or status >= 500
        if status == 401:
            message = (
                f'The URL returned HTTP 401 (Unauthorized). The API at "{url}" requires authentication. '
                "You may need to add an API key or authentication header."
            )
        elif status == 403:
            message = (
                f'The URL returned HTTP 403 (Forbidden). Access to "{url}" is denied. '
                "Check your API credentials or permissions."
            )
        elif status == 404:
            message = f'The URL returned HTTP 404 (Not Found). The resource at "{url}" does not exist.'
        elif status == 429:
            message = f'The URL returned HTTP 429 (Too Many Requests). The API at "{url}" is rate limiting requests.'
        elif status >= 500:
            message = f'The URL returned HTTP {status} ({reason}). The server at "{url}" encountered an error.'
        else:
            message = f"The URL returned HTTP {status}: {reason}"
        return FetchError(message, status_code=status, retryable=retryable)

    def get_output_schema(
        self,
        input_schema: ExtractedSchema | None = None,
        config: Any = None,
    ) -> ExtractedSchema | None:
        return None
