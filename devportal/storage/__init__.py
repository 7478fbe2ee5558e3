"""
Storage layer for canonical customer and staging records.

DynamoDBStore backs production; InMemoryStore serves tests and local runs.
"""

from devportal.storage.base import CustomerStore, Item
from devportal.storage.dynamodb import DynamoDBStore
from devportal.storage.memory import InMemoryStore

__all__ = ["CustomerStore", "DynamoDBStore", "InMemoryStore", "Item"]
