"""
launchdex - index of launchable applications and user files.

Crawls application shortcut folders and user content folders into a JSON
snapshot and keeps it current from filesystem change notifications, so a
launcher UI can search and open items without rescanning the disk.

Stack:
- Python + FastMCP (boundary for the launcher UI)
- watchdog (filesystem notifications)
- JSON snapshot (durable index, one file per profile)
"""

__version__ = "0.1.0"
