"""
Dealership Vehicle Registry Sync - Core Package

This package keeps the local cache of DVLA vehicle facts (MOT status, expiry dates,
technical attributes) fresh for every tracked stock vehicle.
"""

__version__ = "0.2.0"
