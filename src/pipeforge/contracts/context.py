"""Execution context handed to every operator call.

The engine builds one context per run and derives a per-node copy (via
for_node) so operators can tell which node they are executing as.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Protocol

from pipeforge.contracts.errors import ExecutionCancelledError

if TYPE_CHECKING:
    from pipeforge.core.security.web import DomainWhitelist


class SecretsProvider(Protocol):
    """Resolves a stored secret for a user (e.g. an API key)."""

    def decrypt(self, secret_id: str, user_id: str) -> str: ...


class CancellationToken:
    """Cooperative cancellation flag, honored by the engine between nodes.

    Thread-safe; cancel() may be called from any thread.
    """

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ExecutionCancelledError()


@dataclass(frozen=True, slots=True)
class ExecutionContext:
    """Per-run (and per-node) execution context.

    Attributes:
        user_inputs: Caller-supplied values keyed by node id; the engine also
            adds each input node's effective value under its label so
            url-builder params can reference inputs by name.
        node_id: Id of the node currently executing (None outside a run).
        secrets: Secret resolver for authenticated fetches.
        user_id: Owner of the secrets, required when secrets are used.
        cancellation: Optional cancellation token.
        domain_whitelist: Hosts fetch operators may contact. None means the
            configured default list.
        http_timeout: Per-request timeout for fetch operators, in seconds.
        user_agent: User-Agent header sent by fetch operators.
    """

    user_inputs: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    node_id: str | None = None
    secrets: SecretsProvider | None = None
    user_id: str | None = None
    cancellation: CancellationToken | None = None
    domain_whitelist: DomainWhitelist | None = None
    http_timeout: float = 30.0
    user_agent: str = "pipeforge/0.1"

    def for_node(self, node_id: str) -> ExecutionContext:
        return replace(self, node_id=node_id)

    def with_user_inputs(self, user_inputs: Mapping[str, Any]) -> ExecutionContext:
        return replace(self, user_inputs=MappingProxyType(dict(user_inputs)))
