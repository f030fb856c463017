# prodlog/__init__.py
"""
Production data entry - shared infrastructure
Configuration, database engine and key-value storage slots
"""

__version__ = "1.0.0"
