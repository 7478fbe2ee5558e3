"""
Dict-backed implementation of CustomerStore.

Used by the test suite and for running the workflows without AWS. Supports
the filter expressions the workflows issue: equality comparisons joined with
AND, e.g. "UserPoolId = :userId".
"""

import copy
import re
from typing import Any

from devportal.storage.base import Item

_CONDITION = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(:[A-Za-z0-9_]+)\s*$")


def _parse_filter(filter_expression: str) -> list[tuple[str, str]]:
    conditions = []
    for clause in re.split(r"\s+AND\s+", filter_expression, flags=re.IGNORECASE):
        match = _CONDITION.match(clause)
        if not match:
            raise ValueError(f"Unsupported filter expression: {filter_expression!r}")
        conditions.append((match.group(1), match.group(2)))
    return conditions


class InMemoryStore:
    """
    In-memory tables keyed by their primary key attributes.

    Every call is appended to `operations` as (operation, table, key) so
    callers can assert which reads and writes happened.
    """

    def __init__(self, key_schema: dict[str, list[str]]):
        """
        Args:
            key_schema: Table name -> primary key attribute names
        """
        self.key_schema = key_schema
        self.tables: dict[str, dict[tuple, Item]] = {name: {} for name in key_schema}
        self.operations: list[tuple[str, str, Any]] = []

    def _key_of(self, table: str, item: Item) -> tuple:
        if table not in self.key_schema:
            raise KeyError(f"Unknown table: {table}")
        try:
            return tuple(item[attr] for attr in self.key_schema[table])
        except KeyError as e:
            raise ValueError(f"Item for {table} is missing key attribute {e}") from e

    def seed(self, table: str, *items: Item) -> None:
        """Load items without recording operations."""
        for item in items:
            self.tables[table][self._key_of(table, item)] = copy.deepcopy(item)

    def items(self, table: str) -> list[Item]:
        return [copy.deepcopy(item) for item in self.tables[table].values()]

    def writes(self) -> list[tuple[str, str, Any]]:
        """Recorded put and delete operations."""
        return [op for op in self.operations if op[0] in ("put", "delete")]

    async def get(self, table: str, key: Item) -> Item | None:
        self.operations.append(("get", table, dict(key)))
        item = self.tables[table].get(self._key_of(table, key))
        return copy.deepcopy(item) if item is not None else None

    async def put(self, table: str, item: Item) -> None:
        key = self._key_of(table, item)
        self.operations.append(("put", table, dict(zip(self.key_schema[table], key))))
        self.tables[table][key] = copy.deepcopy(item)

    async def delete(self, table: str, key: Item) -> None:
        self.operations.append(("delete", table, dict(key)))
        self.tables[table].pop(self._key_of(table, key), None)

    async def scan(
        self, table: str, filter_expression: str, filter_values: dict[str, Any]
    ) -> list[Item]:
        self.operations.append(("scan", table, filter_expression))
        conditions = _parse_filter(filter_expression)
        return [
            copy.deepcopy(item)
            for item in self.tables[table].values()
            if all(
                attr in item and item[attr] == filter_values[placeholder]
                for attr, placeholder in conditions
            )
        ]
