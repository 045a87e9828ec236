# src/pipeforge/engine/executor.py
"""PipeExecutor: runs a validated pipe definition node by node.

Execution is synchronous. Nodes run one at a time in topological order,
each receiving the result of its first upstream node (or None for roots).
The first failing node halts the run: nodes after it in the order do not
start, and the outcome reports what completed before the failure.

Every run produces an ExecutionOutcome; operator failures, timeouts and
cancellation are reported in it rather than raised.
"""

from __future__ import annotations

import contextvars
import time
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import replace
from types import MappingProxyType
from typing import Any

import structlog

from pipeforge.contracts.context import ExecutionContext
from pipeforge.contracts.definition import DefinitionParseError, OperatorNode, PipeDefinition
from pipeforge.contracts.enums import ExecutionStatus, FailureKind, NodeStatus
from pipeforge.contracts.errors import PipeforgeError, PipeTimeoutError
from pipeforge.contracts.results import ExecutionOutcome, IntermediateResult
from pipeforge.core.config import PipeforgeSettings
from pipeforge.core.dag.graph import GraphCycleError, PipeGraph
from pipeforge.core.logging import node_context
from pipeforge.core.security.web import DomainWhitelist
from pipeforge.engine.output_limit import enforce_output_limit
from pipeforge.operators.base import Operator
from pipeforge.operators.inputs.base import InputOperator, lookup_user_input
from pipeforge.operators.pipe_output import PIPE_OUTPUT_TYPE
from pipeforge.operators.registry import OperatorRegistry
from pipeforge.operators.transforms.comparison import display_string

logger = structlog.get_logger(__name__)

# Shared by every PipeExecutor. Nodes within a run execute one at a time;
# the pool bounds concurrent runs plus timed-out calls still winding down.
_OPERATOR_POOL = ThreadPoolExecutor(max_workers=16, thread_name_prefix="pipeforge-operator")


class _NodeFailure(Exception):
    """Internal: carries a failed node's details out of the run loop."""

    def __init__(self, message: str, kind: FailureKind, node: OperatorNode | None) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.node = node


def sanitize_error(exc: BaseException) -> str:
    """User-facing message for an operator exception.

    PipeforgeError messages are written for pipe authors and pass through.
    Anything else may carry internals (paths, hosts, stack details) and is
    reduced to its class name.
    """
    if isinstance(exc, PipeforgeError):
        return str(exc)
    return f"Unexpected error in operator: {type(exc).__name__}"


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 3)


class PipeExecutor:
    """Executes pipe definitions against a registry.

    Holds no per-run state, so one executor can serve concurrent runs.
    """

    def __init__(self, registry: OperatorRegistry, settings: PipeforgeSettings | None = None) -> None:
        self._registry = registry
        self._settings = settings or PipeforgeSettings()

    def execute(
        self,
        definition: PipeDefinition | Mapping[str, Any],
        user_inputs: Mapping[str, Any] | None = None,
        context: ExecutionContext | None = None,
    ) -> ExecutionOutcome:
        """Run every node and return the outcome.

        Args:
            definition: A validated definition (parsed or wire shape).
            user_inputs: Values for input nodes, keyed by node id.
            context: Base context (secrets, user id, cancellation).
        """
        start = time.perf_counter()
        try:
            parsed = self._parse(definition)
        except _NodeFailure as failure:
            return self._failed(failure, start)
        return self._run(PipeGraph(parsed), user_inputs, context, start, target=None)

    def execute_selected(
        self,
        definition: PipeDefinition | Mapping[str, Any],
        target_node_id: str,
        user_inputs: Mapping[str, Any] | None = None,
        context: ExecutionContext | None = None,
    ) -> ExecutionOutcome:
        """Run only target_node_id and everything upstream of it.

        The outcome's final_result is the target node's result.
        """
        start = time.perf_counter()
        try:
            parsed = self._parse(definition)
            graph = PipeGraph(parsed)
            if not graph.has_node(target_node_id):
                raise _NodeFailure(
                    f"Target node {target_node_id} not found in pipe definition", FailureKind.VALIDATION_ERROR, None
                )
            subgraph = graph.subgraph(graph.upstream_closure(target_node_id))
            self._check_input_connections(subgraph)
        except _NodeFailure as failure:
            return self._failed(failure, start)
        return self._run(subgraph, user_inputs, context, start, target=target_node_id)

    def _parse(self, definition: PipeDefinition | Mapping[str, Any]) -> PipeDefinition:
        try:
            parsed = definition if isinstance(definition, PipeDefinition) else PipeDefinition.from_dict(definition)
        except DefinitionParseError as e:
            raise _NodeFailure(str(e), FailureKind.VALIDATION_ERROR, None) from e
        if not parsed.nodes:
            raise _NodeFailure("Pipe has no operators", FailureKind.VALIDATION_ERROR, None)
        return parsed

    def _check_input_connections(self, graph: PipeGraph) -> None:
        for node in graph.definition.nodes:
            operator = self._registry.get(node.type)
            if operator is not None and operator.category.is_source:
                continue
            if not graph.definition.incoming_edges(node.id):
                raise _NodeFailure(
                    f'Operator "{node.label or node.id}" ({node.type}) has no input connection. '
                    "Non-source operators require an upstream connection.",
                    FailureKind.VALIDATION_ERROR,
                    node,
                )

    def _base_context(self, context: ExecutionContext | None, user_inputs: Mapping[str, Any] | None) -> ExecutionContext:
        security = self._settings.security
        if context is None:
            context = ExecutionContext(http_timeout=security.http_timeout_seconds, user_agent=security.user_agent)
        if context.domain_whitelist is None:
            context = replace(context, domain_whitelist=DomainWhitelist(security.domain_whitelist))
        return context.with_user_inputs({**context.user_inputs, **(user_inputs or {})})

    def _input_operator(self, node: OperatorNode) -> InputOperator[Any] | None:
        operator = self._registry.get(node.type)
        return operator if isinstance(operator, InputOperator) else None

    def _resolve_inputs(self, graph: PipeGraph, context: ExecutionContext) -> ExecutionContext:
        """Check required inputs and expose supplied values under their labels.

        Raises:
            _NodeFailure: For the first required input with no value.
        """
        supplied = dict(context.user_inputs)
        for node in graph.definition.nodes:
            operator = self._input_operator(node)
            if operator is None:
                continue
            label = node.config.get("label")
            label = label if isinstance(label, str) else ""
            value = lookup_user_input(context.user_inputs, node.id, label)
            message = operator.missing_required(node.config, value)
            if message is not None:
                raise _NodeFailure(message, FailureKind.VALIDATION_ERROR, node)
            # url-builder params reference inputs by label
            if label and value is not None:
                supplied.setdefault(label, value)
        return context.with_user_inputs(supplied)

    def _run(
        self,
        graph: PipeGraph,
        user_inputs: Mapping[str, Any] | None,
        context: ExecutionContext | None,
        start: float,
        target: str | None,
    ) -> ExecutionOutcome:
        execution = self._settings.execution
        results: dict[str, Any] = {}
        intermediate: dict[str, IntermediateResult] = {}
        order: list[str] = []
        last_success: Any = None

        try:
            ordering = graph.topological_order()
            run_context = self._resolve_inputs(graph, self._base_context(context, user_inputs))
        except GraphCycleError as e:
            return self._failed(_NodeFailure(str(e), FailureKind.VALIDATION_ERROR, None), start)
        except _NodeFailure as failure:
            return self._failed(failure, start)

        log = logger.bind(node_count=len(ordering), target_node_id=target)
        log.info("pipe_execution_started")

        for node_id in ordering:
            node = graph.get_node(node_id)
            try:
                self._check_limits(run_context, start, execution.pipe_timeout_seconds, node)
            except _NodeFailure as failure:
                return self._failed(failure, start, intermediate, order, last_success)

            operator = self._registry.get(node.type)
            order.append(node_id)
            node_start = time.perf_counter()
            with node_context(node_id, node.type):
                try:
                    if operator is None:
                        raise _NodeFailure(f"Unknown operator type: {node.type}", FailureKind.OPERATOR_ERROR, node)
                    predecessors = graph.predecessors(node_id)
                    data = results.get(predecessors[0]) if predecessors else None
                    result = self._call(
                        operator, data, node, run_context.for_node(node_id), execution.operator_timeout_seconds
                    )
                    # Sizing serializes the result, which fails for output that is not JSON-shaped
                    limited = enforce_output_limit(result, execution.max_output_bytes)
                except _NodeFailure as failure:
                    intermediate[node_id] = self._error_result(node, _elapsed_ms(node_start), failure.message)
                    return self._failed(failure, start, intermediate, order, last_success)
                except Exception as e:
                    message = sanitize_error(e)
                    kind = FailureKind.TIMEOUT if isinstance(e, PipeTimeoutError) else FailureKind.OPERATOR_ERROR
                    log.error(
                        "operator_failed",
                        node_id=node_id,
                        operator_type=node.type,
                        error=message,
                        exc_info=not isinstance(e, PipeforgeError),
                    )
                    intermediate[node_id] = self._error_result(node, _elapsed_ms(node_start), message)
                    failure = _NodeFailure(f"Operator {node_id} ({node.type}) failed: {message}", kind, node)
                    return self._failed(failure, start, intermediate, order, last_success)

                if limited.truncated:
                    log.warning(
                        "output_truncated",
                        node_id=node_id,
                        operator_type=node.type,
                        original_size=limited.original_size,
                        final_size=limited.final_size,
                        original_count=limited.original_count,
                        final_count=limited.final_count,
                    )
            results[node_id] = limited.output
            last_success = limited.output
            intermediate[node_id] = IntermediateResult(
                node_id=node_id,
                type=node.type,
                label=node.display_label,
                result=limited.output,
                execution_time=_elapsed_ms(node_start),
                status=NodeStatus.SUCCESS,
            )

        outcome = ExecutionOutcome(
            status=ExecutionStatus.COMPLETED,
            intermediate_results=MappingProxyType(intermediate),
            execution_order=tuple(order),
            total_execution_time=_elapsed_ms(start),
            final_result=self._final_result(graph, ordering, results, target),
        )
        log.info("pipe_execution_completed", total_execution_time=outcome.total_execution_time)
        return outcome

    def _check_limits(self, context: ExecutionContext, start: float, pipe_timeout: float, node: OperatorNode) -> None:
        if context.cancellation is not None and context.cancellation.cancelled:
            raise _NodeFailure("Execution cancelled", FailureKind.CANCELLED, node)
        if time.perf_counter() - start > pipe_timeout:
            logger.error("pipe_execution_timeout", node_id=node.id, max_seconds=pipe_timeout)
            raise _NodeFailure(
                "Execution timeout: Pipe took too long to complete "
                f"(exceeded {display_string(pipe_timeout / 60)} minutes)",
                FailureKind.TIMEOUT,
                node,
            )

    def _call(
        self,
        operator: Operator[Any],
        data: Any,
        node: OperatorNode,
        context: ExecutionContext,
        timeout: float,
    ) -> Any:
        """Run operator.execute on the shared operator pool, bounded by timeout.

        The call runs in a copy of the caller's contextvars, so the node
        bound by node_context is on every event the operator logs. A
        timed-out call cannot be interrupted: if it has not started it is
        cancelled, otherwise its worker finishes in the background and the
        result is discarded.

        Raises:
            PipeTimeoutError: If execute does not return within timeout.
            Exception: Whatever execute raised.
        """
        future = _OPERATOR_POOL.submit(contextvars.copy_context().run, operator.execute, data, node.config, context)
        try:
            return future.result(timeout=timeout)
        except FuturesTimeoutError:
            future.cancel()
            raise PipeTimeoutError(f"Operator timed out after {display_string(timeout)} seconds") from None

    def _final_result(self, graph: PipeGraph, ordering: list[str], results: dict[str, Any], target: str | None) -> Any:
        if target is not None:
            return results.get(target)
        for node_id in ordering:
            if self._registry.resolve_type(graph.get_node(node_id).type) == PIPE_OUTPUT_TYPE:
                return results.get(node_id)
        return None

    @staticmethod
    def _error_result(node: OperatorNode, execution_time: float, message: str) -> IntermediateResult:
        return IntermediateResult(
            node_id=node.id,
            type=node.type,
            label=node.display_label,
            result=None,
            execution_time=execution_time,
            status=NodeStatus.ERROR,
            error=message,
        )

    @staticmethod
    def _failed(
        failure: _NodeFailure,
        start: float,
        intermediate: dict[str, IntermediateResult] | None = None,
        order: list[str] | None = None,
        last_success: Any = None,
    ) -> ExecutionOutcome:
        return ExecutionOutcome(
            status=ExecutionStatus.FAILED,
            intermediate_results=MappingProxyType(dict(intermediate or {})),
            execution_order=tuple(order or ()),
            total_execution_time=_elapsed_ms(start),
            error=failure.message,
            node_id=failure.node.id if failure.node is not None else None,
            operator_type=failure.node.type if failure.node is not None else None,
            failure_kind=failure.kind,
            last_successful_result=last_success,
        )
