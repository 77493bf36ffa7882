"""
FastAPI REST API for the Vehicle Registry Sync

Provides REST endpoints to:
- Trigger a registry sweep (single sweep at a time)
- Refresh one vehicle on demand
- Read registry coverage statistics
- Health checks
"""
