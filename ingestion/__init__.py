"""
Snapshot pipeline components for price data ingestion.

Modules:
    base: Abstract dataset handler (artifact naming, row mapping)
    handlers: Concrete handlers for prices, premises and items
    periods: Period enumeration and selection
    runner: Orchestrator for fetch, load, reduce, export and archive
    scheduler: APScheduler integration for periodic snapshot builds

Subpackages:
    extractors: Remote artifact cache and Parquet decoding
    loaders: Batched loads into the working store
    transformers: Latest-value reduction of price observations
    exporters: Stepped snapshot copy and zip archiving

Architecture:
    A run processes one period in stages:

    1. Resolve - Download or reuse the three cached Parquet artifacts
    2. Load - Decode, map and insert every dataset into an in-memory store
    3. Reduce - Keep the latest price per (premise, item) pair
    4. Export - Copy the store page-wise into the snapshot file
    5. Archive - Package the snapshot into a zip

    Any fatal error aborts the run; the previous snapshot stays in place.

Example:
    runner = PipelineRunner()
    result = await runner.run("2024-03")

    print(f"Latest prices: {result['latest_prices']}")
"""
