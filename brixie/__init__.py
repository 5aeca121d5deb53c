"""
Brixie Catalog Backend

A local-first sync layer for the Brixie LEGO catalog browser.
Fetches sets and themes from Rebrickable, caches them in SQLite,
and keeps serving cached data when the network is unavailable.
"""

__version__ = "1.0.0"
