"""
Command-line entry points: pos-cache (cache maintenance) and pos-serve (API server).
"""
