"""
Custom exceptions for the Streamgraph subscription core.
"""

from __future__ import annotations

from typing import Iterable, Union

from graphql import ExecutionResult, GraphQLError


class StreamgraphError(Exception):
    """Base exception for all streamgraph errors."""
    pass


class SubscriptionError(StreamgraphError):
    """
    Raised when a subscription request cannot be turned into a stream.

    Carries the GraphQL errors that end up in the request-level result.
    """

    def __init__(self, errors: Union[str, GraphQLError, Iterable[GraphQLError]]):
        self.errors = _as_graphql_errors(errors)
        super().__init__("; ".join(error.message for error in self.errors))

    def to_result(self) -> ExecutionResult:
        """Convert to a request-level result without data."""
        return error_result(self.errors)


class ConfigError(StreamgraphError):
    """Raised when streamgraph configuration is invalid."""
    pass


def _as_graphql_errors(
    errors: Union[str, GraphQLError, Iterable[GraphQLError]],
) -> list[GraphQLError]:
    if isinstance(errors, str):
        return [GraphQLError(errors)]
    if isinstance(errors, GraphQLError):
        return [errors]
    return list(errors)


def error_result(errors: Union[str, GraphQLError, Iterable[GraphQLError]]) -> ExecutionResult:
    """
    Build a request-level result carrying only errors.

    Args:
        errors: A message, a single GraphQLError or a list of them

    Returns:
        ExecutionResult with data=None
    """
    return ExecutionResult(None, errors=_as_graphql_errors(errors))
