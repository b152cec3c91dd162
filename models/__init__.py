"""
SQLAlchemy table definitions for the working store and snapshot schema.

The same three tables exist in the ephemeral in-memory working store and in
every snapshot file produced from it:

Tables:
    prices: Price observations (date, premise_code, item_code, price)
    premises: Premise lookup (premise_code + five descriptive columns)
    items: Item lookup (item_code + four descriptive columns)

Indexes cover the join and filter columns used by the latest-value reduction
and by downstream queries (premise/item codes, premise type, state,
district, item group and category).

Usage:
    from models import metadata, prices, premises, items
    from models.base import DatasetKind

Example:
    engine = create_engine("sqlite://")
    metadata.create_all(engine)
"""

from models.base import metadata, DatasetKind
from models.prices import prices
from models.premises import premises
from models.items import items

__all__ = [
    "metadata",
    "DatasetKind",
    "prices",
    "premises",
    "items",
]
