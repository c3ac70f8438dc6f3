"""
Data access layer for DoseCare: SQLAlchemy models, services and the
DatabaseManager (see dal.database)
"""

__version__ = "1.0.0"
