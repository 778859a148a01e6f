"""
Subscription initialization.

Validates a subscription request, resolves the source event stream from the
root field's subscribe resolver and maps every source event to a GraphQL
execution result.

Failures before the first event never raise: they come back as a single
ExecutionResult with errors and no stream.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, AsyncIterable, Callable, Dict, List, Optional, Tuple, Union

from graphql import (
    ExecutionResult,
    FieldNode,
    GraphQLField,
    GraphQLFieldResolver,
    GraphQLObjectType,
    OperationType,
    execute,
)
from graphql.error import located_error
from graphql.execution import ExecutionContext
from graphql.execution.collect_fields import collect_fields
from graphql.execution.values import get_argument_values
from graphql.pyutils import Path
from graphql.pyutils import inspect as inspect_value

from ..config import StreamgraphConfig, get_config
from ..core.errors import SubscriptionError
from ..streams.mapper import StreamMapper
from .request import SubscriptionRequest, build_request

logger = logging.getLogger(__name__)

NOT_DEFINED_MESSAGE = "This subscription is not defined by the schema."
SINGLE_FIELD_MESSAGE = "Subscription operations must have exactly one root field."

ExecuteFn = Callable[..., Any]


async def subscribe(
    schema: Any = None,
    document: Any = None,
    root_value: Any = None,
    context_value: Any = None,
    variable_values: Optional[Dict[str, Any]] = None,
    operation_name: Optional[str] = None,
    *,
    subscribe_field_resolver: Optional[GraphQLFieldResolver] = None,
    execute_fn: Optional[ExecuteFn] = None,
    config: Optional[StreamgraphConfig] = None,
) -> Union[StreamMapper, ExecutionResult]:
    """
    Create a GraphQL subscription.

    Arguments can be passed one by one, or as a single SubscriptionRequest or
    mapping of request fields (``subscribe({"schema": ..., "document": ...})``).

    Args:
        schema: GraphQLSchema, or the whole request
        document: Parsed subscription document
        root_value: Root value handed to the subscribe resolver
        context_value: Context shared by resolvers
        variable_values: Raw variable values
        operation_name: Operation to run when the document has several
        subscribe_field_resolver: Fallback used when the field has no subscribe
        execute_fn: Per-event executor (defaults to graphql.execute)
        config: Configuration (defaults to the global one)

    Returns:
        StreamMapper yielding one ExecutionResult per source event, or an
        ExecutionResult with errors if the subscription could not be created
    """
    try:
        request = build_request(
            schema, document, root_value, context_value, variable_values, operation_name
        )
        source, field_name = await _resolve_source(request, subscribe_field_resolver, config)
    except SubscriptionError as error:
        logger.info(f"Subscription rejected: {error}")
        return error.to_result()

    logger.info(f"Subscription started for root field: {field_name}")
    return StreamMapper(source, _event_executor(request, field_name, execute_fn or execute))


async def create_source_event_stream(
    schema: Any = None,
    document: Any = None,
    root_value: Any = None,
    context_value: Any = None,
    variable_values: Optional[Dict[str, Any]] = None,
    operation_name: Optional[str] = None,
    *,
    subscribe_field_resolver: Optional[GraphQLFieldResolver] = None,
    config: Optional[StreamgraphConfig] = None,
) -> Union[AsyncIterable, ExecutionResult]:
    """
    Resolve the source event stream without executing events.

    Useful when the stateful event source lives apart from the executor.

    Returns:
        The raw source stream, or an ExecutionResult with errors
    """
    try:
        request = build_request(
            schema, document, root_value, context_value, variable_values, operation_name
        )
        source, _ = await _resolve_source(request, subscribe_field_resolver, config)
    except SubscriptionError as error:
        return error.to_result()
    return source


async def _resolve_source(
    request: SubscriptionRequest,
    subscribe_field_resolver: Optional[GraphQLFieldResolver],
    config: Optional[StreamgraphConfig],
) -> Tuple[AsyncIterable, str]:
    context = ExecutionContext.build(
        request.schema_,
        request.document,
        root_value=request.root_value,
        context_value=request.context_value,
        raw_variable_values=request.variable_values,
        operation_name=request.operation_name,
        subscribe_field_resolver=subscribe_field_resolver,
    )
    if isinstance(context, list):
        raise SubscriptionError(context)

    root_type, response_name, field_nodes, field_def = _root_field(
        context, config or get_config()
    )
    field_name = field_nodes[0].name.value
    path = Path(None, response_name, root_type.name)
    info = context.build_resolve_info(field_def, field_nodes, root_type, path)

    try:
        args = get_argument_values(field_def, field_nodes[0], context.variable_values)
        resolve_fn = field_def.subscribe or context.subscribe_field_resolver

        result = resolve_fn(context.root_value, info, **args)
        if inspect.isawaitable(result):
            result = await result

        # Resolvers may hand back a factory for the stream
        if callable(result) and not isinstance(result, AsyncIterable):
            result = result()
            if inspect.isawaitable(result):
                result = await result

        if isinstance(result, Exception):
            raise result
    except Exception as error:
        raise SubscriptionError(
            located_error(error, field_nodes, path.as_list())
        ) from error

    if not isinstance(result, AsyncIterable):
        raise SubscriptionError(
            f"Subscription must return Async Iterable. Received: {inspect_value(result)}"
        )

    return result, field_name


def _root_field(
    context: ExecutionContext,
    config: StreamgraphConfig,
) -> Tuple[GraphQLObjectType, str, List[FieldNode], GraphQLField]:
    """
    Find the root field whose resolver provides the event stream.

    Only the first root field is used; additional ones are ignored unless
    strict_root_field is configured, in which case they are rejected.
    """
    operation = context.operation
    root_type = context.schema.subscription_type
    if operation.operation != OperationType.SUBSCRIPTION or root_type is None:
        raise SubscriptionError(NOT_DEFINED_MESSAGE)

    fields = collect_fields(
        context.schema,
        context.fragments,
        context.variable_values,
        root_type,
        operation.selection_set,
    )
    if not fields:
        raise SubscriptionError(NOT_DEFINED_MESSAGE)

    if len(fields) > 1:
        if config.subscription.strict_root_field:
            raise SubscriptionError(SINGLE_FIELD_MESSAGE)
        logger.warning(
            f"Subscription selects {len(fields)} root fields, "
            f"only '{next(iter(fields))}' will be resolved"
        )

    response_name, field_nodes = next(iter(fields.items()))
    field_def = root_type.fields.get(field_nodes[0].name.value)
    if field_def is None:
        raise SubscriptionError(NOT_DEFINED_MESSAGE)

    return root_type, response_name, field_nodes, field_def


def _event_executor(
    request: SubscriptionRequest,
    field_name: str,
    execute_fn: ExecuteFn,
) -> Callable[[Any], Any]:
    """Bind the per-event executor: run the document against {field_name: event}."""

    async def execute_event(event: Any) -> ExecutionResult:
        result = execute_fn(
            request.schema_,
            request.document,
            {field_name: event},
            request.context_value,
            request.variable_values,
            request.operation_name,
        )
        if inspect.isawaitable(result):
            result = await result
        return result

    return execute_event
