"""
Pydantic schemas for data validation and serialization.

Schemas:
    records: Mapped dataset records (price observations, premises, items)
    cache: Cached artifact entries with their freshness fingerprint
    api: API endpoint response models

Validation:
    - Numeric codes must be 64-bit integers and prices floats; any other
      value rejects the row
    - Descriptive text is trimmed and defaults to "UNKNOWN"
    - Observation dates keep only the calendar day
"""
