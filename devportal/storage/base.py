"""
Key-value store interface consumed by the customer workflows.

Implementations:
- DynamoDBStore: boto3 DynamoDB tables (production)
- InMemoryStore: dict-backed tables (tests, local development)
"""

from typing import Any, Protocol, runtime_checkable

Item = dict[str, Any]


@runtime_checkable
class CustomerStore(Protocol):
    """
    Minimal table operations.

    Failures surface as StoreReadError (get, scan) or StoreWriteError
    (put, delete). Deleting a missing key is not an error.
    """

    async def get(self, table: str, key: Item) -> Item | None:
        """Fetch one item by primary key, or None when absent."""
        ...

    async def put(self, table: str, item: Item) -> None:
        """Write (create or replace) one item."""
        ...

    async def delete(self, table: str, key: Item) -> None:
        """Remove one item by primary key."""
        ...

    async def scan(
        self, table: str, filter_expression: str, filter_values: dict[str, Any]
    ) -> list[Item]:
        """Return every item matching the filter, across all pages."""
        ...
