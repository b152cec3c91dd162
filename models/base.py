from sqlalchemy import MetaData
import enum

metadata = MetaData()


# ============================================================================
# ENUMS
# ============================================================================

class DatasetKind(str, enum.Enum):
    """Logical datasets published by the source bucket"""
    PRICES = "prices"
    PREMISES = "premises"
    ITEMS = "items"
