"""
Diff-Diff Tuning System - Core Package

This package contains the core modules for:
- Chart difficulty inference and player ratings (src.diffdiff)
- Persistence gateways (src.storage)
- Shared configuration and utilities
"""

from src.config import *
