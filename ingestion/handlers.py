"""
Ingest handlers for the three PriceCatcher datasets
"""

from typing import Dict, List
from ingestion.base import DatasetHandler
from models.base import DatasetKind
from models.prices import prices
from models.premises import premises
from models.items import items
from schemas.records import PriceObservation, Premise, Item


class PriceHandler(DatasetHandler):
    """Monthly price observations, one artifact per period"""
    kind = DatasetKind.PRICES
    table = prices
    record_model = PriceObservation

    def artifact_name(self, period: str) -> str:
        return f"pricecatcher_{period}"


class PremiseHandler(DatasetHandler):
    """Premise lookup, a single artifact shared by all periods"""
    kind = DatasetKind.PREMISES
    table = premises
    record_model = Premise

    def artifact_name(self, period: str) -> str:
        return "lookup_premise"


class ItemHandler(DatasetHandler):
    """Item lookup, a single artifact shared by all periods"""
    kind = DatasetKind.ITEMS
    table = items
    record_model = Item

    def artifact_name(self, period: str) -> str:
        return "lookup_item"


HANDLERS: Dict[DatasetKind, DatasetHandler] = {
    handler.kind: handler
    for handler in (ItemHandler(), PremiseHandler(), PriceHandler())
}


def get_handler(kind: DatasetKind) -> DatasetHandler:
    """Return the ingest handler for a dataset kind."""
    return HANDLERS[kind]


def all_handlers() -> List[DatasetHandler]:
    """Handlers in load order: lookups first, then prices."""
    return list(HANDLERS.values())
