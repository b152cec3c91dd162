from sqlalchemy import Table, Column, BigInteger, Text, Index
from models.base import metadata

# premise_code is unique per the source dataset; no constraint is declared so
# an upstream duplicate loads as-is rather than aborting the run.
premises = Table(
    "premises",
    metadata,
    Column("premise_code", BigInteger, nullable=False),
    Column("premise", Text, nullable=False),
    Column("address", Text, nullable=False),
    Column("premise_type", Text, nullable=False),
    Column("state", Text, nullable=False),
    Column("district", Text, nullable=False),
    Index("idx_premises_premise_code", "premise_code"),
    Index("idx_premises_premise_type", "premise_type"),
    Index("idx_premises_state", "state"),
    Index("idx_premises_district", "district"),
)
