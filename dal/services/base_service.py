#!/usr/bin/env python3
"""
Base service class for DoseCare data access
"""

import logging
from typing import Optional
from datetime import datetime
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lib.exceptions import NotFoundError

logger = logging.getLogger(__name__)

class BaseService:
    """Base service class with common database operations"""

    def __init__(self, db_session: Session):
        self.db = db_session

    def get_or_404(self, model, record_id: str, label: Optional[str] = None):
        """Fetch a row by primary key or raise NotFoundError"""
        record = self.db.get(model, record_id)
        if record is None:
            raise NotFoundError(f"{label or model.__name__} not found")
        return record

    def commit(self, *records):
        """Add the given rows, commit and refresh them"""
        try:
            for record in records:
                self.db.add(record)
            self.db.commit()
            for record in records:
                self.db.refresh(record)
        except SQLAlchemyError as e:
            logger.error(f"❌ Commit failed: {e}")
            self.db.rollback()
            raise
        return records[0] if len(records) == 1 else records

    def delete(self, record):
        try:
            self.db.delete(record)
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"❌ Delete failed: {e}")
            self.db.rollback()
            raise

    def apply_date_filter(self, query, model, field_name: str,
                         start_date: Optional[datetime] = None,
                         end_date: Optional[datetime] = None):
        """Apply date filtering to a query, end bound exclusive"""
        if start_date:
            query = query.filter(getattr(model, field_name) >= start_date)
        if end_date:
            query = query.filter(getattr(model, field_name) < end_date)
        return query
