"""
Utility modules for the Foodly client.

This package contains:
- gate: fetch gating (marker freshness and burst suppression) for the caches
- clock: millisecond wall clock used by the caches
"""
