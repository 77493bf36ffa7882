"""
Vehicle Registry Synchronization

Staleness selection, paced registry lookups, dual-write persistence and statistics.
"""
