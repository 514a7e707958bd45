"""
Feedback router. Students send feedback and read their own entries,
admins review, answer and delete them.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from typing import List
from tutorhub.auth_tools import Identity, require_user, admin_only, verify_owner_or_admin
from tutorhub.database.storage import DatabaseStorage, get_storage
from tutorhub.logger import logger
from tutorhub.schemas.authentication_schema import MessageResponse
from tutorhub.schemas.feedback_schema import (
    FeedbackCreate, FeedbackUpdate, FeedbackResponse, FeedbackWithRelations, FeedbackStatsResponse
)
from tutorhub.utilities import hydrate_feedback

router = APIRouter(prefix='/feedback')

@router.get('', response_model=List[FeedbackWithRelations])
def list_feedback(storage: DatabaseStorage = Depends(get_storage), identity: Identity = Depends(require_user)):
    """
    List feedback with the sending student attached.
    Admins get every entry, students only what they sent.
    """
    if identity.is_admin:
        entries = storage.get_all_feedback()
    else:
        entries = storage.get_feedback_by_student_id(identity.user_id)
    return hydrate_feedback(storage, entries)

@router.get('/stats', response_model=FeedbackStatsResponse)
def feedback_stats(storage: DatabaseStorage = Depends(get_storage), _: Identity = Depends(admin_only)):
    return storage.get_feedback_stats()

@router.get('/{feedback_id}', response_model=FeedbackWithRelations)
def get_feedback(feedback_id: str, storage: DatabaseStorage = Depends(get_storage), identity: Identity = Depends(require_user)):
    entry = storage.get_feedback(feedback_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Feedback not found")
    verify_owner_or_admin(identity, entry.student_id, "Forbidden: You can only view your own feedback")
    return hydrate_feedback(storage, [entry])[0]

@router.post('', response_model=FeedbackResponse)
def submit_feedback(feedback: FeedbackCreate, storage: DatabaseStorage = Depends(get_storage), identity: Identity = Depends(require_user)):
    """
    Send feedback. It is stored as pending under the caller's id.

    Raises:
    - HTTPException(400): If the rating is not a number between 1 and 5
    """
    data = feedback.model_dump()
    data["student_id"] = identity.user_id
    try:
        created = storage.create_feedback(data)
    except IntegrityError as e:
        logger.error(f"Error creating feedback: {str(e)}")
        raise HTTPException(status_code=400, detail="Failed to submit feedback")
    return created

@router.put('/{feedback_id}', response_model=FeedbackResponse)
def review_feedback(feedback_id: str, review: FeedbackUpdate, storage: DatabaseStorage = Depends(get_storage), admin: Identity = Depends(admin_only)):
    """Set the status and/or admin response of a feedback entry."""
    changes = review.model_dump(exclude_unset=True)
    try:
        updated = storage.update_feedback(feedback_id, changes)
    except IntegrityError as e:
        logger.error(f"Error updating feedback {feedback_id}: {str(e)}")
        raise HTTPException(status_code=400, detail="Failed to update feedback")
    if not updated:
        raise HTTPException(status_code=404, detail="Feedback not found")
    logger.info(f"Feedback {feedback_id} reviewed by admin {admin.user_id}")
    return updated

@router.delete('/{feedback_id}', response_model=MessageResponse)
def delete_feedback(feedback_id: str, storage: DatabaseStorage = Depends(get_storage), _: Identity = Depends(admin_only)):
    storage.delete_feedback(feedback_id)
    return {"message": "Feedback deleted successfully"}
