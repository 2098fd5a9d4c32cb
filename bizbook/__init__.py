"""
bizbook - Source Package

A local bookkeeping and task-tracking core for a small business:
revenue, expenses, vendors, personal tasks and a monthly report.

DESIGN PRINCIPLES:
1. Stores own their state; every change produces a new snapshot
2. Every mutation is written through to durable storage
3. Reports are pure functions over snapshots
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "bizbook Team"
