from typing import List, Optional
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.session_record import SessionRecord
from app.schemas.session_record import SessionRecordCreate


class CRUDSessionRecord(CRUDBase[SessionRecord, SessionRecordCreate, SessionRecordCreate]):
    def create_for_email(
        self, db: Session, *, obj_in: SessionRecordCreate, user_email: str
    ) -> SessionRecord:
        obj_in_data = obj_in.model_dump()
        obj_in_data["user_email"] = user_email
        db_obj = self.model(**obj_in_data)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get_by_email(
        self, db: Session, *, user_email: str, skip: int = 0, limit: Optional[int] = None
    ) -> List[SessionRecord]:
        query = (
            db.query(self.model)
            .filter(SessionRecord.user_email == user_email)
            .order_by(SessionRecord.scheduled_date.desc())
            .offset(skip)
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()


session_record = CRUDSessionRecord(SessionRecord)
