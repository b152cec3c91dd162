from sqlalchemy import Table, Column, Date, BigInteger, Float, Index
from models.base import metadata

# One row per price observation. Before reduction a (premise_code, item_code)
# pair appears once per observed day; after reduction only the latest remains.
prices = Table(
    "prices",
    metadata,
    Column("date", Date, nullable=False),
    Column("premise_code", BigInteger, nullable=False),
    Column("item_code", BigInteger, nullable=False),
    Column("price", Float, nullable=False),
    Index("idx_prices_premise_code", "premise_code"),
    Index("idx_prices_item_code", "item_code"),
)
