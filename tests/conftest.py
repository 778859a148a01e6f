"""
Pytest configuration and shared fixtures for streamgraph tests.
"""
from typing import Any, Callable, Dict, List, Optional

import pytest
from graphql import (
    GraphQLArgument,
    GraphQLBoolean,
    GraphQLField,
    GraphQLInt,
    GraphQLList,
    GraphQLObjectType,
    GraphQLSchema,
    GraphQLString,
    parse,
)

from streamgraph import EventEmitter, StreamgraphConfig, set_config

EmailType = GraphQLObjectType(
    "Email",
    {
        "from": GraphQLField(GraphQLString),
        "subject": GraphQLField(GraphQLString),
        "message": GraphQLField(GraphQLString),
        "unread": GraphQLField(GraphQLBoolean),
    },
)

InboxType = GraphQLObjectType(
    "Inbox",
    {
        "total": GraphQLField(
            GraphQLInt, resolve=lambda inbox, _info: len(inbox["emails"])
        ),
        "unread": GraphQLField(
            GraphQLInt,
            resolve=lambda inbox, _info: sum(
                1 for email in inbox["emails"] if email["unread"]
            ),
        ),
        "emails": GraphQLField(GraphQLList(EmailType)),
    },
)

QueryType = GraphQLObjectType("Query", {"inbox": GraphQLField(InboxType)})

EmailEventType = GraphQLObjectType(
    "EmailEvent",
    {"email": GraphQLField(EmailType), "inbox": GraphQLField(InboxType)},
)


def email_schema_with_resolvers(
    subscribe_fn: Optional[Callable] = None,
    resolve_fn: Optional[Callable] = None,
) -> GraphQLSchema:
    return GraphQLSchema(
        query=QueryType,
        subscription=GraphQLObjectType(
            "Subscription",
            {
                "importantEmail": GraphQLField(
                    EmailEventType,
                    args={"priority": GraphQLArgument(GraphQLInt)},
                    resolve=resolve_fn,
                    subscribe=subscribe_fn,
                )
            },
        ),
    )


email_schema = email_schema_with_resolvers()

DEFAULT_DOCUMENT = parse(
    """
    subscription ($priority: Int = 0) {
      importantEmail(priority: $priority) {
        email {
          from
          subject
        }
        inbox {
          unread
          total
        }
      }
    }
    """
)


class EmailFeed:
    """
    Mail server double: keeps an inbox and emits one event per new email.
    """

    def __init__(self, pubsub: EventEmitter):
        self.pubsub = pubsub
        self.inbox: Dict[str, List[Dict[str, Any]]] = {
            "emails": [
                {
                    "from": "joe@graphql.org",
                    "subject": "Hello",
                    "message": "Hello World",
                    "unread": False,
                }
            ]
        }

    @property
    def root_value(self) -> Dict[str, Any]:
        return {
            "inbox": self.inbox,
            "importantEmail": lambda _info, **_args: self.pubsub.stream("importantEmail"),
        }

    def send(self, email: Dict[str, Any]) -> bool:
        """Add email to the inbox; returns True if a subscriber consumed it."""
        self.inbox["emails"].append(email)
        return self.pubsub.emit(
            "importantEmail", {"email": email, "inbox": self.inbox}
        )


def email(subject: str, sender: str = "yuzhi@graphql.org") -> Dict[str, Any]:
    return {
        "from": sender,
        "subject": subject,
        "message": "Tests are good",
        "unread": True,
    }


def email_payload(subject: str, unread: int, total: int, sender: str = "yuzhi@graphql.org"):
    return {
        "importantEmail": {
            "email": {"from": sender, "subject": subject},
            "inbox": {"unread": unread, "total": total},
        }
    }


@pytest.fixture(autouse=True)
def default_config():
    """Isolate tests from streamgraph.yaml and environment overrides."""
    set_config(StreamgraphConfig())
    yield
    set_config(None)


@pytest.fixture
def pubsub():
    return EventEmitter()


@pytest.fixture
def feed(pubsub):
    return EmailFeed(pubsub)
