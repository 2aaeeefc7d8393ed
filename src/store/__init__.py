"""Storage layer.

This module persists nested buckets of raw byte values in DuckDB.
It exposes transactions, bucket scopes, and ordered cursors to navigation.
"""
