"""Ingestion layer.

This package contains the adapters that pull data from the vessel backend
(list polling, route fetching, static boundaries) and turn it into
normalized records and map features.
"""

__all__: list[str] = []
