"""
Tutoring session router handling bookings between students and tutors.
Students book and see their own sessions; admins see and edit all of them.
"""
from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from typing import Any, Dict, List
from tutorhub.auth_tools import Identity, require_user, admin_only, verify_owner_or_admin
from tutorhub.database.storage import DatabaseStorage, get_storage
from tutorhub.logger import logger
from tutorhub.schemas.authentication_schema import MessageResponse
from tutorhub.schemas.session_schema import (
    TutoringSessionCreate, TutoringSessionUpdate, TutoringSessionResponse,
    TutoringSessionWithRelations, SessionStatsResponse
)
from tutorhub.utilities import format_validation_errors, hydrate_sessions

router = APIRouter(prefix='/sessions')

# The only fields a student may change on their own booking
STUDENT_EDITABLE_FIELDS = ("status", "notes")

@router.get('', response_model=List[TutoringSessionWithRelations])
def list_sessions(storage: DatabaseStorage = Depends(get_storage), identity: Identity = Depends(require_user)):
    """
    List sessions with tutor and student attached.
    Admins get every session, students only their own.
    """
    if identity.is_admin:
        sessions = storage.get_all_sessions()
    else:
        sessions = storage.get_sessions_by_student_id(identity.user_id)
    return hydrate_sessions(storage, sessions)

@router.get('/upcoming', response_model=List[TutoringSessionWithRelations])
def list_upcoming_sessions(storage: DatabaseStorage = Depends(get_storage), identity: Identity = Depends(require_user)):
    """The caller's scheduled sessions that have not started yet, soonest first."""
    return hydrate_sessions(storage, storage.get_upcoming_sessions(identity.user_id))

@router.get('/stats', response_model=SessionStatsResponse)
def session_stats(storage: DatabaseStorage = Depends(get_storage), identity: Identity = Depends(require_user)):
    return storage.get_student_session_stats(identity.user_id)

@router.get('/{session_id}', response_model=TutoringSessionWithRelations)
def get_session(session_id: str, storage: DatabaseStorage = Depends(get_storage), identity: Identity = Depends(require_user)):
    session = storage.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    verify_owner_or_admin(identity, session.student_id, "Forbidden: You can only view your own sessions")
    return hydrate_sessions(storage, [session])[0]

@router.post('', response_model=TutoringSessionResponse)
def book_session(booking: TutoringSessionCreate, storage: DatabaseStorage = Depends(get_storage), identity: Identity = Depends(require_user)):
    """
    Book a session with a tutor. The caller is always the student of the booking.

    Raises:
    - HTTPException(400): If the tutor does not exist
    """
    data = booking.model_dump()
    data["student_id"] = identity.user_id
    try:
        session = storage.create_session(data)
    except IntegrityError as e:
        logger.error(f"Error creating session: {str(e)}")
        raise HTTPException(status_code=400, detail="Failed to create session")
    logger.info(f"Session {session.id} booked by {identity.user_id} with tutor {session.tutor_id}")
    return session

@router.put('/{session_id}', response_model=TutoringSessionResponse)
def update_session(
    session_id: str,
    payload: Dict[str, Any] = Body(...),
    storage: DatabaseStorage = Depends(get_storage),
    identity: Identity = Depends(require_user)
):
    """
    Update a session.

    Admins may change every field. The owning student may change status and notes
    only; anything else in the body is dropped before validation.

    Raises:
    - HTTPException(404): If the session does not exist
    - HTTPException(403): If the caller is neither the owner nor an admin
    - HTTPException(400): If the remaining fields do not validate
    """
    existing = storage.get_session(session_id)
    if not existing:
        raise HTTPException(status_code=404, detail="Session not found")

    verify_owner_or_admin(identity, existing.student_id, "Forbidden: You can only update your own sessions")

    if not identity.is_admin:
        payload = {key: value for key, value in payload.items() if key in STUDENT_EDITABLE_FIELDS}

    try:
        changes = TutoringSessionUpdate.model_validate(payload)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=format_validation_errors(e.errors()))

    try:
        session = storage.update_session(session_id, changes.model_dump(exclude_unset=True))
    except IntegrityError as e:
        logger.error(f"Error updating session {session_id}: {str(e)}")
        raise HTTPException(status_code=400, detail="Failed to update session")
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session

@router.delete('/{session_id}', response_model=MessageResponse)
def delete_session(session_id: str, storage: DatabaseStorage = Depends(get_storage), admin: Identity = Depends(admin_only)):
    storage.delete_session(session_id)
    logger.info(f"Session {session_id} deleted by admin {admin.user_id}")
    return {"message": "Session deleted successfully"}
