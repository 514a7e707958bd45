"""
Data-access layer. One method per operation the routers need, grouped by entity.

Every create/update commits and returns the refreshed row so callers see
server-side defaults (generated id, timestamps, default status).
"""
from datetime import datetime, time, timedelta
from typing import Any, Dict, List, Optional

from fastapi import Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from tutorhub.database.database import (
    get_db, utcnow, User, UserRole, Tutor, TutoringSession, SessionStatus,
    LearningMaterial, LectureVideo, Feedback, FeedbackStatus
)

# Never taken from a client payload
PROTECTED_FIELDS = ("id", "created_at", "updated_at")


def strip_protected_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if key not in PROTECTED_FIELDS}


class DatabaseStorage:
    def __init__(self, db: Session):
        self.db = db

    ##########################
    ### INTERNAL HELPERS  ###
    ##########################

    def _touch(self, row) -> None:
        """Refresh updated_at. The new value is always later than the previous one."""
        now = utcnow()
        if row.updated_at is not None and now <= row.updated_at:
            now = row.updated_at + timedelta(microseconds=1)
        row.updated_at = now

    def _insert(self, row):
        self.db.add(row)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(row)
        return row

    def _apply(self, row, data: Dict[str, Any]):
        for key, value in strip_protected_fields(data).items():
            setattr(row, key, value)
        self._touch(row)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(row)
        return row

    def _delete(self, model, row_id: str) -> int:
        # Bulk delete so the ON DELETE rules of the database handle dependents
        deleted = self.db.query(model).filter(model.id == row_id).delete(synchronize_session=False)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return deleted

    ##########################
    ##### USER OPERATIONS ####
    ##########################

    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def get_users_by_ids(self, user_ids) -> Dict[str, User]:
        ids = {user_id for user_id in user_ids if user_id}
        if not ids:
            return {}
        return {user.id: user for user in self.db.query(User).filter(User.id.in_(ids)).all()}

    def upsert_user(self, data: Dict[str, Any]) -> User:
        """Insert a user or update the existing one with the same id (external identities)."""
        user = self.get_user(data["id"]) if data.get("id") else None
        if user is None:
            return self._insert(User(**data))
        fields = {key: value for key, value in data.items() if key != "role"}
        return self._apply(user, fields)

    def create_user_with_password(self, email: str, password_hash: str, first_name: str,
                                  last_name: str, role: UserRole) -> User:
        return self._insert(User(
            email=email,
            password=password_hash,
            first_name=first_name,
            last_name=last_name,
            role=role
        ))

    def get_all_users(self) -> List[User]:
        return self.db.query(User).order_by(User.created_at.desc()).all()

    def update_user_role(self, user_id: str, role: UserRole) -> Optional[User]:
        user = self.get_user(user_id)
        if user is None:
            return None
        return self._apply(user, {"role": role})

    ##########################
    #### TUTOR OPERATIONS ####
    ##########################

    def get_all_tutors(self) -> List[Tutor]:
        return self.db.query(Tutor).order_by(Tutor.created_at.desc()).all()

    def get_tutor(self, tutor_id: str) -> Optional[Tutor]:
        return self.db.get(Tutor, tutor_id)

    def get_tutors_by_ids(self, tutor_ids) -> Dict[str, Tutor]:
        ids = {tutor_id for tutor_id in tutor_ids if tutor_id}
        if not ids:
            return {}
        return {tutor.id: tutor for tutor in self.db.query(Tutor).filter(Tutor.id.in_(ids)).all()}

    def create_tutor(self, data: Dict[str, Any]) -> Tutor:
        return self._insert(Tutor(**strip_protected_fields(data)))

    def update_tutor(self, tutor_id: str, data: Dict[str, Any]) -> Optional[Tutor]:
        tutor = self.get_tutor(tutor_id)
        if tutor is None:
            return None
        return self._apply(tutor, data)

    def delete_tutor(self, tutor_id: str) -> int:
        return self._delete(Tutor, tutor_id)

    ###############################
    ### TUTORING SESSION OPERATIONS
    ###############################

    def get_all_sessions(self) -> List[TutoringSession]:
        return self.db.query(TutoringSession).order_by(TutoringSession.created_at.desc()).all()

    def get_session(self, session_id: str) -> Optional[TutoringSession]:
        return self.db.get(TutoringSession, session_id)

    def get_sessions_by_student_id(self, student_id: str) -> List[TutoringSession]:
        return (
            self.db.query(TutoringSession)
            .filter(TutoringSession.student_id == student_id)
            .order_by(TutoringSession.created_at.desc())
            .all()
        )

    def get_upcoming_sessions(self, student_id: str, now: Optional[datetime] = None) -> List[TutoringSession]:
        now = now or utcnow()
        return (
            self.db.query(TutoringSession)
            .filter(
                TutoringSession.student_id == student_id,
                TutoringSession.status == SessionStatus.SCHEDULED,
                TutoringSession.scheduled_date >= now
            )
            .order_by(TutoringSession.scheduled_date.asc())
            .all()
        )

    def create_session(self, data: Dict[str, Any]) -> TutoringSession:
        return self._insert(TutoringSession(**strip_protected_fields(data)))

    def update_session(self, session_id: str, data: Dict[str, Any]) -> Optional[TutoringSession]:
        session = self.get_session(session_id)
        if session is None:
            return None
        return self._apply(session, data)

    def delete_session(self, session_id: str) -> int:
        return self._delete(TutoringSession, session_id)

    ###############################
    ### LEARNING MATERIAL OPERATIONS
    ###############################

    def get_all_materials(self) -> List[LearningMaterial]:
        return self.db.query(LearningMaterial).order_by(LearningMaterial.created_at.desc()).all()

    def get_material(self, material_id: str) -> Optional[LearningMaterial]:
        return self.db.get(LearningMaterial, material_id)

    def create_material(self, data: Dict[str, Any]) -> LearningMaterial:
        return self._insert(LearningMaterial(**strip_protected_fields(data)))

    def delete_material(self, material_id: str) -> int:
        return self._delete(LearningMaterial, material_id)

    ###############################
    ### LECTURE VIDEO OPERATIONS ##
    ###############################

    def get_all_videos(self) -> List[LectureVideo]:
        return self.db.query(LectureVideo).order_by(LectureVideo.created_at.desc()).all()

    def get_video(self, video_id: str) -> Optional[LectureVideo]:
        return self.db.get(LectureVideo, video_id)

    def create_video(self, data: Dict[str, Any]) -> LectureVideo:
        return self._insert(LectureVideo(**strip_protected_fields(data)))

    def delete_video(self, video_id: str) -> int:
        return self._delete(LectureVideo, video_id)

    ##########################
    ## FEEDBACK OPERATIONS ###
    ##########################

    def get_all_feedback(self) -> List[Feedback]:
        return self.db.query(Feedback).order_by(Feedback.created_at.desc()).all()

    def get_feedback(self, feedback_id: str) -> Optional[Feedback]:
        return self.db.get(Feedback, feedback_id)

    def get_feedback_by_student_id(self, student_id: str) -> List[Feedback]:
        return (
            self.db.query(Feedback)
            .filter(Feedback.student_id == student_id)
            .order_by(Feedback.created_at.desc())
            .all()
        )

    def create_feedback(self, data: Dict[str, Any]) -> Feedback:
        return self._insert(Feedback(**strip_protected_fields(data)))

    def update_feedback(self, feedback_id: str, data: Dict[str, Any]) -> Optional[Feedback]:
        feedback = self.get_feedback(feedback_id)
        if feedback is None:
            return None
        return self._apply(feedback, data)

    def delete_feedback(self, feedback_id: str) -> int:
        return self._delete(Feedback, feedback_id)

    ##########################
    ####### STATISTICS #######
    ##########################

    def get_student_session_stats(self, student_id: str, now: Optional[datetime] = None) -> Dict[str, int]:
        now = now or utcnow()
        owned = self.db.query(func.count(TutoringSession.id)).filter(TutoringSession.student_id == student_id)
        return {
            "total_sessions": owned.scalar(),
            "completed_sessions": owned.filter(TutoringSession.status == SessionStatus.COMPLETED).scalar(),
            "upcoming_sessions": owned.filter(
                TutoringSession.status == SessionStatus.SCHEDULED,
                TutoringSession.scheduled_date > now
            ).scalar(),
        }

    def get_admin_stats(self, now: Optional[datetime] = None) -> Dict[str, int]:
        now = now or utcnow()
        today = datetime.combine(now.date(), time.min)
        tomorrow = today + timedelta(days=1)
        return {
            "total_students": self.db.query(func.count(User.id)).filter(User.role == UserRole.STUDENT).scalar(),
            "total_tutors": self.db.query(func.count(Tutor.id)).scalar(),
            "total_sessions": self.db.query(func.count(TutoringSession.id)).scalar(),
            "sessions_today": self.db.query(func.count(TutoringSession.id)).filter(
                TutoringSession.scheduled_date >= today,
                TutoringSession.scheduled_date < tomorrow
            ).scalar(),
        }

    def get_feedback_stats(self) -> Dict[str, int]:
        counts = dict(
            self.db.query(Feedback.status, func.count(Feedback.id)).group_by(Feedback.status).all()
        )
        stats = {status.value: counts.get(status, 0) for status in FeedbackStatus}
        stats["total"] = sum(counts.values())
        return stats


def get_storage(db: Session = Depends(get_db)) -> DatabaseStorage:
    return DatabaseStorage(db)
