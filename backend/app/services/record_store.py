"""Record persistence: create, list, replace and delete by id.

One RecordStore per table. Callers own the session; every mutation commits.
"""
import logging
from typing import Any, Dict, List, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import RecordNotFoundError
from app.services.record_mapper import row_to_dict

logger = logging.getLogger(__name__)


class RecordStore:
    def __init__(self, db: Session, model: Type):
        self.db = db
        self.model = model
        self.table = model.__tablename__

    def _get(self, record_id: int):
        row = self.db.query(self.model).filter(self.model.id == record_id).first()
        if row is None:
            raise RecordNotFoundError(self.table, record_id)
        return row

    def _commit(self):
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def create(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a record; id and created_at are assigned here."""
        values = {k: v for k, v in fields.items() if k not in ("id", "created_at")}
        row = self.model(**values)
        self.db.add(row)
        self._commit()
        self.db.refresh(row)
        logger.info(f"Created {self.table} #{row.id}")
        return row_to_dict(row)

    def list_all(self) -> List[Dict[str, Any]]:
        """All records, newest first."""
        rows = (
            self.db.query(self.model)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
            .all()
        )
        return [row_to_dict(row) for row in rows]

    def get(self, record_id: int) -> Dict[str, Any]:
        return row_to_dict(self._get(record_id))

    def update(self, record_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        row = self._get(record_id)
        for key, value in fields.items():
            if key in ("id", "created_at"):
                continue
            setattr(row, key, value)
        self._commit()
        self.db.refresh(row)
        logger.info(f"Updated {self.table} #{record_id}")
        return row_to_dict(row)

    def delete(self, record_id: int) -> None:
        row = self._get(record_id)
        self.db.delete(row)
        self._commit()
        logger.info(f"Deleted {self.table} #{record_id}")
