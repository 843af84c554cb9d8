"""
NMR Mirror
- Scans instrument data shares for recently changed sample folders.
- Mirrors only those folders to a destination with an external tool (robocopy).
- Logs acquisition metadata of each copied experiment to a per-instrument CSV.

Usage
  pip install -e .
  nmr-mirror nmr400
  nmr-mirror nmr400 --config ./config.json --days 5
"""

__version__ = "0.1.0"
