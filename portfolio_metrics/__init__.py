"""
Portfolio Metrics Package.

Derived metrics engine for the client portfolio dashboard. Computes health
distribution, revenue composition, MRR trend, NPS and renewal pipeline
bundles from an in-memory client roster.

Subpackages:
    - core: Configuration, logging setup, and error types
    - models: Pydantic schemas and enums
    - services: Calculators, aggregator, summaries, and roster ingestion
"""

__version__ = "1.0.0"
