"""
Collapse price observations to the latest value per (premise, item) pair
"""

from typing import Tuple
from sqlalchemy import column, func, insert, literal_column, select, table, text
from sqlalchemy.exc import SQLAlchemyError
from core.database import SqliteStore
from core.exceptions import ReductionError
from models.prices import prices
import logging

logger = logging.getLogger(__name__)

OBSERVED_TABLE = "prices_observed"


def reduce_latest(store: SqliteStore) -> Tuple[int, int]:
    """
    Replace ``prices`` with one row per (premise_code, item_code).

    Observations are ranked per pair by date, newest first, and only the
    first-ranked row is kept. Among observations sharing the newest date the
    earliest loaded one (lowest rowid) wins; the choice is stable for a given
    input file but carries no meaning beyond that.

    The observation table is renamed aside, a fresh ``prices`` table is built
    with the same indexes, filled ordered by pair, and the old table dropped.

    Returns:
        Row counts before and after reduction

    Raises:
        ReductionError: If any statement fails
    """
    observed = table(
        OBSERVED_TABLE,
        column("date"),
        column("premise_code"),
        column("item_code"),
        column("price"),
    )
    ranked = select(
        observed.c.date,
        observed.c.premise_code,
        observed.c.item_code,
        observed.c.price,
        func.row_number().over(
            partition_by=(observed.c.premise_code, observed.c.item_code),
            order_by=(observed.c.date.desc(), literal_column("rowid")),
        ).label("observation_rank"),
    ).subquery("ranked")
    latest = (
        select(ranked.c.date, ranked.c.premise_code, ranked.c.item_code, ranked.c.price)
        .where(ranked.c.observation_rank == 1)
        .order_by(ranked.c.premise_code, ranked.c.item_code)
    )

    try:
        with store.engine.begin() as conn:
            rows_before = conn.execute(select(func.count()).select_from(prices)).scalar_one()

            for index in prices.indexes:
                index.drop(conn)
            conn.execute(text(f"ALTER TABLE {prices.name} RENAME TO {OBSERVED_TABLE}"))
            prices.create(conn)

            conn.execute(
                insert(prices).from_select(
                    ["date", "premise_code", "item_code", "price"], latest
                )
            )
            conn.execute(text(f"DROP TABLE {OBSERVED_TABLE}"))

            rows_after = conn.execute(select(func.count()).select_from(prices)).scalar_one()
    except SQLAlchemyError as e:
        raise ReductionError(
            "Failed to reduce price observations to latest values",
            context={"table_name": prices.name},
            original_exception=e
        )

    logger.info(f"Reduced {prices.name}: {rows_before} observations -> {rows_after} latest values")
    return rows_before, rows_after
