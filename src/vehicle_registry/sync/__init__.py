"""
Registry Sync Package

Staleness selection, persistence, sweep orchestration and statistics.
Import components from their modules (the client depends on sync.config).
"""
