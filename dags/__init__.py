"""
Airflow DAGs Package

DAGs:
- registry_refresh: Refresh stale DVLA registry data for tracked vehicles (1:00 AM)
"""
