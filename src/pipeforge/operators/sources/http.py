# src/pipeforge/operators/sources/http.py
"""Shared HTTP machinery for fetch operators.

Every fetch goes through the same steps:

1. URL security (scheme, private networks), then the domain whitelist.
2. Headers: User-Agent, the operator's Accept, config headers, then the
   resolved secret header if secretRef is set.
3. GET with the context's timeout. Redirects are followed manually so each
   hop passes the same security checks as the original URL. Credential
   headers are not sent to a redirect target on another host.
4. Non-2xx responses, timeouts, and transport failures are mapped to
   FetchError with a message the pipe author can act on.

Subclasses provide the Accept header, the failure prefix and the 404
wording, and parse the successful response.
"""

from __future__ import annotations

import urllib.parse
from abc import abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar, Generic, TypeVar

import httpx
import structlog
from pydantic import Field, field_validator, model_validator

from pipeforge.contracts.context import ExecutionContext
from pipeforge.contracts.enums import OperatorCategory
from pipeforge.contracts.errors import FetchError, SecurityError
from pipeforge.core.security.web import DomainWhitelist, ensure_fetch_allowed, is_valid_and_safe_url
from pipeforge.operators.base import Operator
from pipeforge.operators.config_base import EntryConfig, OperatorConfig, is_absent, require_string, required_field
from pipeforge.operators.transforms.comparison import display_string

logger = structlog.get_logger(__name__)

MAX_REDIRECTS = 5

INVALID_FETCH_URL = "Invalid URL format or localhost/private IPs are not allowed"
SECRETS_UNAVAILABLE = "Authentication required to use secrets"


class SecretRef(EntryConfig):
    """Reference to a stored secret sent as a request header."""

    secret_id: str = Field(alias="secretId")
    header_name: str = Field(alias="headerName")
    header_format: str | None = Field(default=None, alias="headerFormat")

    @model_validator(mode="before")
    @classmethod
    def check_shape(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            raise ValueError("secretRef must be an object")
        for key in ("secretId", "headerName"):
            value = data.get(key)
            if not isinstance(value, str) or not value:
                raise ValueError(f"secretRef.{key} is required")
        if not is_absent(data.get("headerFormat")) and not isinstance(data.get("headerFormat"), str):
            raise ValueError("secretRef.headerFormat must be a string")
        return data

    def header_value(self, secret: str) -> str:
        if not self.header_format:
            return secret
        return self.header_format.replace("{value}", secret, 1)


class FetchConfig(OperatorConfig):
    url: str = required_field()
    headers: dict[str, str] = Field(default_factory=dict)
    secret_ref: SecretRef | None = Field(default=None, alias="secretRef")

    @field_validator("url", mode="before")
    @classmethod
    def check_url(cls, v: Any) -> str:
        url = require_string(v, "URL is required", "URL must be a string")
        if not is_valid_and_safe_url(url):
            raise ValueError(INVALID_FETCH_URL)
        return url

    @field_validator("headers", mode="before")
    @classmethod
    def check_headers(cls, v: Any) -> dict[str, str]:
        if is_absent(v):
            return {}
        if not isinstance(v, Mapping):
            raise ValueError("Headers must be an object")
        return {str(k): display_string(value) if not isinstance(value, str) else value for k, value in v.items()}


FetchConfigT = TypeVar("FetchConfigT", bound=FetchConfig)


def _host(url: str) -> str:
    try:
        return urllib.parse.urlsplit(url).hostname or ""
    except ValueError:
        return ""


class FetchOperatorBase(Operator[FetchConfigT], Generic[FetchConfigT]):
    """GET a URL and turn the response body into pipe data."""

    category = OperatorCategory.SOURCES
    accept: ClassVar[str] = "*/*"
    failure_prefix: ClassVar[str] = "Fetch failed"
    not_found: ClassVar[str] = "Resource does not exist."

    def run(self, data: Any, config: FetchConfigT, context: ExecutionContext) -> Any:
        response = self.fetch(config, context)
        return self.parse_response(response, config)

    @abstractmethod
    def parse_response(self, response: httpx.Response, config: FetchConfigT) -> Any:
        """Turn a 2xx response into this operator's result."""
        ...

    def build_headers(self, config: FetchConfigT, context: ExecutionContext) -> dict[str, str]:
        headers = {"User-Agent": context.user_agent, "Accept": self.accept, **config.headers}
        if config.secret_ref is not None:
            headers[config.secret_ref.header_name] = self.resolve_secret(config.secret_ref, context)
        return headers

    def credential_headers(self, config: FetchConfigT) -> frozenset[str]:
        """Lowercased names of headers that must not leave the original host."""
        names = {"authorization", "proxy-authorization"}
        if config.secret_ref is not None:
            names.add(config.secret_ref.header_name.lower())
        return frozenset(names)

    def resolve_secret(self, ref: SecretRef, context: ExecutionContext) -> str:
        if context.secrets is None or not context.user_id:
            raise SecurityError(SECRETS_UNAVAILABLE)
        return ref.header_value(context.secrets.decrypt(ref.secret_id, context.user_id))

    def fetch(self, config: FetchConfigT, context: ExecutionContext) -> httpx.Response:
        """Perform the guarded GET.

        Raises:
            SecurityError: URL or a redirect target violates policy.
            FetchError: Non-2xx status, timeout, or transport failure.
        """
        whitelist = context.domain_whitelist or DomainWhitelist()
        ensure_fetch_allowed(config.url, whitelist, user_id=context.user_id)
        headers = self.build_headers(config, context)

        try:
            with httpx.Client(timeout=context.http_timeout, follow_redirects=False) as client:
                response = client.get(config.url, headers=headers)
                response = self._follow_redirects(
                    client, response, headers, whitelist, context, self.credential_headers(config)
                )
        except httpx.TimeoutException as e:
            raise FetchError(
                f"Request timeout: The request took longer than {display_string(context.http_timeout)} seconds",
                retryable=True,
            ) from e
        except httpx.TransportError as e:
            host = _host(config.url)
            target = host or "the server"
            raise FetchError(f"Network error: Unable to reach {target}", retryable=True) from e
        except httpx.HTTPError as e:
            raise FetchError(f"{self.failure_prefix}: {e}") from e

        if not response.is_success:
            self.check_error_response(response, config)
            raise self.status_error(response.status_code, response.reason_phrase, config.url)

        logger.debug(
            "fetch_completed",
            operator_type=self.type,
            url=config.url,
            status_code=response.status_code,
            bytes=len(response.content),
        )
        return response

    def _follow_redirects(
        self,
        client: httpx.Client,
        response: httpx.Response,
        headers: dict[str, str],
        whitelist: DomainWhitelist,
        context: ExecutionContext,
        credential_headers: frozenset[str] = frozenset(),
    ) -> httpx.Response:
        """Follow up to MAX_REDIRECTS hops, checking each target's URL.

        Once a hop leaves the original host, credential headers (Authorization
        and the secretRef header) are dropped for the rest of the chain.
        """
        origin = response.url.host
        hops = 0
        while response.is_redirect:
            location = response.headers.get("location")
            if not location:
                break
            if hops >= MAX_REDIRECTS:
                raise FetchError(f"{self.failure_prefix}: Too many redirects")
            target = response.url.join(location)
            ensure_fetch_allowed(str(target), whitelist, user_id=context.user_id)
            if target.host != origin:
                headers = {k: v for k, v in headers.items() if k.lower() not in credential_headers}
            response = client.get(target, headers=headers)
            hops += 1
        return response

    def check_error_response(self, response: httpx.Response, config: FetchConfigT) -> None:
        """Hook for operators that inspect error bodies before the status."""

    def status_error(self, status: int, reason: str, url: str) -> FetchError:
        retryable = status == 429 or status >= 500
        if status == 401:
            message = "The URL returned HTTP 401 (Unauthorized). Authentication required."
        elif status == 403:
            message = "The URL returned HTTP 403 (Forbidden). Access denied."
        elif status == 404:
            message = f"The URL returned HTTP 404 (Not Found). {self.not_found}"
        elif status >= 500:
            message = f"The URL returned HTTP {status} ({reason}). Server error."
        else:
            message = f"The URL returned HTTP {status}: {reason}"
        return FetchError(message, status_code=status, retryable=retryable)
