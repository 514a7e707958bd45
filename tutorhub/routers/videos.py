"""
Lecture video router. Readable by every logged in user, uploads and deletes are admin only.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from typing import List
from tutorhub.auth_tools import Identity, require_user, admin_only
from tutorhub.database.storage import DatabaseStorage, get_storage
from tutorhub.logger import logger
from tutorhub.schemas.authentication_schema import MessageResponse
from tutorhub.schemas.video_schema import LectureVideoCreate, LectureVideoResponse, LectureVideoWithRelations
from tutorhub.utilities import hydrate_videos

router = APIRouter(prefix='/videos')

@router.get('', response_model=List[LectureVideoWithRelations])
def list_videos(storage: DatabaseStorage = Depends(get_storage), _: Identity = Depends(require_user)):
    """
    List lecture videos, newest first.

    Returns:
    - List of videos with tutor (null when none or deleted) and uploader attached
    """
    return hydrate_videos(storage, storage.get_all_videos())

@router.get('/{video_id}', response_model=LectureVideoWithRelations)
def get_video(video_id: str, storage: DatabaseStorage = Depends(get_storage), _: Identity = Depends(require_user)):
    video = storage.get_video(video_id)
    if not video:
        raise HTTPException(status_code=404, detail="Video not found")
    return hydrate_videos(storage, [video])[0]

@router.post('', response_model=LectureVideoResponse)
def create_video(video: LectureVideoCreate, storage: DatabaseStorage = Depends(get_storage), admin: Identity = Depends(admin_only)):
    """
    Add a lecture video.

    Raises:
    - HTTPException(400): If the referenced tutor does not exist
    """
    data = video.model_dump()
    data["uploaded_by_id"] = admin.user_id
    try:
        created = storage.create_video(data)
    except IntegrityError as e:
        logger.error(f"Error creating video: {str(e)}")
        raise HTTPException(status_code=400, detail="Failed to create video")
    return created

@router.delete('/{video_id}', response_model=MessageResponse)
def delete_video(video_id: str, storage: DatabaseStorage = Depends(get_storage), _: Identity = Depends(admin_only)):
    storage.delete_video(video_id)
    return {"message": "Video deleted successfully"}
