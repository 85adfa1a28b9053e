"""
Store layer: RemoteOrderStore interface and the in-process paper store.
"""

from ordersync.store.base import Collection, RemoteOrderStore, Subscription
from ordersync.store.memory import InMemoryOrderStore

__all__ = [
    "Collection",
    "RemoteOrderStore",
    "Subscription",
    "InMemoryOrderStore",
]
