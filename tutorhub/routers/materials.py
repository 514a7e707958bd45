"""
Learning material router. Readable by every logged in user, uploads and deletes are admin only.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from typing import List
from tutorhub.auth_tools import Identity, require_user, admin_only
from tutorhub.database.storage import DatabaseStorage, get_storage
from tutorhub.logger import logger
from tutorhub.schemas.authentication_schema import MessageResponse
from tutorhub.schemas.material_schema import LearningMaterialCreate, LearningMaterialResponse, LearningMaterialWithRelations
from tutorhub.utilities import hydrate_materials

router = APIRouter(prefix='/materials')

@router.get('', response_model=List[LearningMaterialWithRelations])
def list_materials(storage: DatabaseStorage = Depends(get_storage), _: Identity = Depends(require_user)):
    """List materials, newest first, each with its uploader attached."""
    return hydrate_materials(storage, storage.get_all_materials())

@router.get('/{material_id}', response_model=LearningMaterialWithRelations)
def get_material(material_id: str, storage: DatabaseStorage = Depends(get_storage), _: Identity = Depends(require_user)):
    material = storage.get_material(material_id)
    if not material:
        raise HTTPException(status_code=404, detail="Material not found")
    return hydrate_materials(storage, [material])[0]

@router.post('', response_model=LearningMaterialResponse)
def create_material(material: LearningMaterialCreate, storage: DatabaseStorage = Depends(get_storage), admin: Identity = Depends(admin_only)):
    data = material.model_dump()
    data["uploaded_by_id"] = admin.user_id
    try:
        created = storage.create_material(data)
    except IntegrityError as e:
        logger.error(f"Error creating material: {str(e)}")
        raise HTTPException(status_code=400, detail="Failed to create material")
    return created

@router.delete('/{material_id}', response_model=MessageResponse)
def delete_material(material_id: str, storage: DatabaseStorage = Depends(get_storage), _: Identity = Depends(admin_only)):
    storage.delete_material(material_id)
    return {"message": "Material deleted successfully"}
