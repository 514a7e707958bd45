"""
Relation hydration for list and detail responses.

Related rows are fetched with one IN query per relation for the whole batch.
A reference whose row no longer exists becomes null instead of failing the request.
"""
from typing import List
from tutorhub.database.database import TutoringSession, LearningMaterial, LectureVideo, Feedback
from tutorhub.database.storage import DatabaseStorage
from tutorhub.schemas.session_schema import TutoringSessionWithRelations
from tutorhub.schemas.material_schema import LearningMaterialWithRelations
from tutorhub.schemas.video_schema import LectureVideoWithRelations
from tutorhub.schemas.feedback_schema import FeedbackWithRelations
from tutorhub.schemas.tutor_schema import TutorResponse
from tutorhub.schemas.user_schema import UserResponse

def _as(schema, row):
    return schema.model_validate(row) if row is not None else None

def hydrate_sessions(storage: DatabaseStorage, sessions: List[TutoringSession]) -> List[TutoringSessionWithRelations]:
    """Attach tutor and student to each session"""
    tutors = storage.get_tutors_by_ids(s.tutor_id for s in sessions)
    students = storage.get_users_by_ids(s.student_id for s in sessions)
    return [
        TutoringSessionWithRelations.model_validate(session).model_copy(update={
            "tutor": _as(TutorResponse, tutors.get(session.tutor_id)),
            "student": _as(UserResponse, students.get(session.student_id)),
        })
        for session in sessions
    ]

def hydrate_materials(storage: DatabaseStorage, materials: List[LearningMaterial]) -> List[LearningMaterialWithRelations]:
    uploaders = storage.get_users_by_ids(m.uploaded_by_id for m in materials)
    return [
        LearningMaterialWithRelations.model_validate(material).model_copy(update={
            "uploaded_by": _as(UserResponse, uploaders.get(material.uploaded_by_id)),
        })
        for material in materials
    ]

def hydrate_videos(storage: DatabaseStorage, videos: List[LectureVideo]) -> List[LectureVideoWithRelations]:
    tutors = storage.get_tutors_by_ids(v.tutor_id for v in videos)
    uploaders = storage.get_users_by_ids(v.uploaded_by_id for v in videos)
    return [
        LectureVideoWithRelations.model_validate(video).model_copy(update={
            "tutor": _as(TutorResponse, tutors.get(video.tutor_id)),
            "uploaded_by": _as(UserResponse, uploaders.get(video.uploaded_by_id)),
        })
        for video in videos
    ]

def hydrate_feedback(storage: DatabaseStorage, entries: List[Feedback]) -> List[FeedbackWithRelations]:
    students = storage.get_users_by_ids(f.student_id for f in entries)
    return [
        FeedbackWithRelations.model_validate(entry).model_copy(update={
            "student": _as(UserResponse, students.get(entry.student_id)),
        })
        for entry in entries
    ]

def format_validation_errors(errors) -> str:
    """Flatten pydantic error entries into 'field: reason; field: reason'."""
    parts = []
    for item in errors:
        # Request errors are prefixed with where the value came from
        loc = [str(part) for part in item.get("loc", ()) if part not in ("body", "query", "path")]
        msg = item["msg"].removeprefix("Value error, ")
        parts.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return "; ".join(parts) or "Invalid request"
