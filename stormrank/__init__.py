"""
stormrank package
=================

Ranks storm event types by public-health harm and inflation-adjusted
economic damage, using the NOAA Storm Data record set.

- The CLI entry point is in `stormrank/cli.py`.
- The pipeline (normalize -> adjust -> aggregate) is wired in `stormrank/engine.py`.
- Dataset loading is in `stormrank/loader.py`.
"""

__version__ = '0.1.0'
