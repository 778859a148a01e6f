"""
Pydantic model for incoming subscription requests.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from graphql import DocumentNode, GraphQLError, GraphQLSchema
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from ..core.errors import SubscriptionError


class SubscriptionRequest(BaseModel):
    """
    Subscription request from client.

    Accepts both snake_case and camelCase keys:
    {
        "schema": <GraphQLSchema>,
        "document": <DocumentNode>,
        "rootValue": {...},
        "contextValue": {...},
        "variableValues": {"priority": 1},
        "operationName": "OnEmail"
    }

    Schema and document are optional here so that a missing one is reported
    as a request-level error result rather than a validation failure.
    """
    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    schema_: Optional[GraphQLSchema] = Field(default=None, alias="schema")
    document: Optional[DocumentNode] = None
    root_value: Any = None
    context_value: Any = None
    variable_values: Optional[Dict[str, Any]] = None
    operation_name: Optional[str] = None


def build_request(
    schema: Any = None,
    document: Any = None,
    root_value: Any = None,
    context_value: Any = None,
    variable_values: Optional[Dict[str, Any]] = None,
    operation_name: Optional[str] = None,
) -> SubscriptionRequest:
    """
    Normalize call arguments into a SubscriptionRequest.

    The first argument may itself be a SubscriptionRequest or a mapping of
    request fields, in which case the remaining arguments must be omitted.

    Schema and document presence is checked before any type validation, so
    a missing schema is always the first error reported.

    Raises:
        SubscriptionError: If the arguments do not form a valid request
    """
    if isinstance(schema, SubscriptionRequest):
        _require(schema.schema_, schema.document)
        return schema

    try:
        if isinstance(schema, Mapping):
            data = dict(schema)
            _require(data.get("schema", data.get("schema_")), data.get("document"))
            return SubscriptionRequest.model_validate(data)

        _require(schema, document)
        return SubscriptionRequest(
            schema=schema,
            document=document,
            root_value=root_value,
            context_value=context_value,
            variable_values=variable_values,
            operation_name=operation_name,
        )
    except ValidationError as e:
        raise SubscriptionError(
            [_describe(error) for error in e.errors()]
        ) from e


def _require(schema: Any, document: Any) -> None:
    if schema is None:
        raise SubscriptionError("Must provide schema")
    if document is None:
        raise SubscriptionError("Must provide document")


def _describe(error: Mapping[str, Any]) -> GraphQLError:
    location = ".".join(str(part) for part in error.get("loc", ()))
    return GraphQLError(f"Invalid subscription request{f' ({location})' if location else ''}: {error['msg']}")
