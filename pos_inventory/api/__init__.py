"""
HTTP admin API over the cache-aware services.
"""
