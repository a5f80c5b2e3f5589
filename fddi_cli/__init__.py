"""
FDDI CLI Module

Configuration and command line tools for the record store.

This module provides:
- YAML-based store configuration
- Commands to initialise, import into and export from a store
- Validation and progress reports for JSON record files
"""

__version__ = "0.1.0"
