"""Index operations module.

Separate operation classes for querying, inserting and updating index data.
"""

from xkcdvault.services.index.operations.insert import InsertOperations
from xkcdvault.services.index.operations.query import QueryOperations
from xkcdvault.services.index.operations.update import UpdateOperations

__all__ = ["InsertOperations", "QueryOperations", "UpdateOperations"]
