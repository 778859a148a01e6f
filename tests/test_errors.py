"""
Tests for package exceptions and request-level results.
"""
from graphql import ExecutionResult, GraphQLError

from streamgraph import StreamgraphError, SubscriptionError, error_result


class TestErrorResult:
    """Tests for error_result."""

    def test_from_message(self):
        """Test a plain message becoming a single GraphQLError."""
        result = error_result("Must provide schema")

        assert isinstance(result, ExecutionResult)
        assert result.data is None
        assert [error.message for error in result.errors] == ["Must provide schema"]

    def test_from_errors(self):
        """Test that existing GraphQLErrors are kept as given."""
        errors = [GraphQLError("first"), GraphQLError("second")]

        result = error_result(errors)

        assert result.errors == errors


class TestSubscriptionError:
    """Tests for SubscriptionError."""

    def test_is_streamgraph_error(self):
        """Test the exception hierarchy."""
        assert issubclass(SubscriptionError, StreamgraphError)

    def test_message_joins_errors(self):
        """Test the exception message for several errors."""
        error = SubscriptionError([GraphQLError("first"), GraphQLError("second")])

        assert str(error) == "first; second"

    def test_to_result_matches_error_result(self):
        """Test conversion to a request-level result."""
        single = GraphQLError("Must provide document")

        result = SubscriptionError(single).to_result()

        assert result == error_result(single)
        assert result.errors == [single]
