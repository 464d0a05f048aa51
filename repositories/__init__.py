"""
Repository Layer Package

This package contains repository classes that encapsulate all database access.
Repositories provide a clean abstraction over the relational aggregate, making
the resolver code testable without a live database.

Key Components:
- BaseRepository: Foundation class with read_df() and error translation
- AggregatedOrdersRepository: Region market presence from aggregated_orders
"""

from repositories.base import BaseRepository
from repositories.aggregated_orders_repo import AggregatedOrdersRepository

__all__ = [
    "BaseRepository",
    "AggregatedOrdersRepository",
]
