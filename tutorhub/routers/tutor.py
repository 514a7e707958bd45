"""
Tutor router. Every logged in user can browse tutors, only admins manage them.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from typing import List
from tutorhub.auth_tools import Identity, require_user, admin_only
from tutorhub.database.storage import DatabaseStorage, get_storage
from tutorhub.logger import logger
from tutorhub.schemas.authentication_schema import MessageResponse
from tutorhub.schemas.tutor_schema import TutorCreate, TutorUpdate, TutorResponse

router = APIRouter(prefix='/tutors')

@router.get('', response_model=List[TutorResponse])
def list_tutors(storage: DatabaseStorage = Depends(get_storage), _: Identity = Depends(require_user)):
    """List all tutors, newest first."""
    return storage.get_all_tutors()

@router.get('/{tutor_id}', response_model=TutorResponse)
def get_tutor(tutor_id: str, storage: DatabaseStorage = Depends(get_storage), _: Identity = Depends(require_user)):
    tutor = storage.get_tutor(tutor_id)
    if not tutor:
        raise HTTPException(status_code=404, detail="Tutor not found")
    return tutor

@router.post('', response_model=TutorResponse)
def create_tutor(tutor: TutorCreate, storage: DatabaseStorage = Depends(get_storage), admin: Identity = Depends(admin_only)):
    """
    Create a tutor.

    Raises:
    - HTTPException(400): If the email already belongs to another tutor
    """
    try:
        created = storage.create_tutor(tutor.model_dump())
    except IntegrityError as e:
        logger.error(f"Error creating tutor: {str(e)}")
        raise HTTPException(status_code=400, detail="Failed to create tutor")
    logger.info(f"Tutor {created.id} created by admin {admin.user_id}")
    return created

@router.put('/{tutor_id}', response_model=TutorResponse)
def update_tutor(tutor_id: str, tutor: TutorUpdate, storage: DatabaseStorage = Depends(get_storage), _: Identity = Depends(admin_only)):
    """Apply the submitted fields to a tutor."""
    try:
        updated = storage.update_tutor(tutor_id, tutor.model_dump(exclude_unset=True))
    except IntegrityError as e:
        logger.error(f"Error updating tutor {tutor_id}: {str(e)}")
        raise HTTPException(status_code=400, detail="Failed to update tutor")
    if not updated:
        raise HTTPException(status_code=404, detail="Tutor not found")
    return updated

@router.delete('/{tutor_id}', response_model=MessageResponse)
def delete_tutor(tutor_id: str, storage: DatabaseStorage = Depends(get_storage), admin: Identity = Depends(admin_only)):
    """
    Delete a tutor. Their tutoring sessions are deleted with them,
    their lecture videos stay and lose the tutor reference.
    """
    storage.delete_tutor(tutor_id)
    logger.info(f"Tutor {tutor_id} deleted by admin {admin.user_id}")
    return {"message": "Tutor deleted successfully"}
