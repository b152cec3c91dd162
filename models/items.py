from sqlalchemy import Table, Column, BigInteger, Text, Index
from models.base import metadata

items = Table(
    "items",
    metadata,
    Column("item_code", BigInteger, nullable=False),
    Column("item", Text, nullable=False),
    Column("unit", Text, nullable=False),
    Column("item_group", Text, nullable=False),
    Column("item_category", Text, nullable=False),
    Index("idx_items_item_code", "item_code"),
    Index("idx_items_item_group", "item_group"),
    Index("idx_items_item_category", "item_category"),
)
