"""
Admin router providing the dashboard, the user list and role management.
Requires admin authentication for all endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException
from typing import List
from tutorhub.auth_tools import Identity, admin_only
from tutorhub.database.database import UserRole
from tutorhub.database.storage import DatabaseStorage, get_storage
from tutorhub.logger import logger, audit_logger
from tutorhub.schemas.admin_schema import AdminStatsResponse
from tutorhub.schemas.session_schema import TutoringSessionWithRelations
from tutorhub.schemas.user_schema import RoleUpdate, UserResponse
from tutorhub.utilities import hydrate_sessions

router = APIRouter(prefix='/admin')

@router.get('/stats', response_model=AdminStatsResponse)
def admin_stats(storage: DatabaseStorage = Depends(get_storage), _: Identity = Depends(admin_only)):
    """
    Fetch admin dashboard data.

    Returns:
        AdminStatsResponse: student, tutor and session counts plus the sessions scheduled today (UTC)
    """
    return storage.get_admin_stats()

@router.get('/students', response_model=List[UserResponse])
def list_students(storage: DatabaseStorage = Depends(get_storage), _: Identity = Depends(admin_only)):
    """
    Retrieve every user account, newest first.
    Admins are listed too so their role can be changed back.
    """
    return storage.get_all_users()

@router.get('/sessions', response_model=List[TutoringSessionWithRelations])
def list_all_sessions(storage: DatabaseStorage = Depends(get_storage), _: Identity = Depends(admin_only)):
    return hydrate_sessions(storage, storage.get_all_sessions())

@router.put('/users/{user_id}/role', response_model=UserResponse)
def change_user_role(
    user_id: str,
    update: RoleUpdate,
    storage: DatabaseStorage = Depends(get_storage),
    admin: Identity = Depends(admin_only)
):
    """
    Change the role of a user.

    Args:
        user_id (str): The ID of the user to update.
        update (RoleUpdate): The new role, 'student' or 'admin'.

    Raises:
        HTTPException: 404 if the user does not exist.

    Returns:
        UserResponse: The updated user.
    """
    user = storage.update_user_role(user_id, UserRole(update.role))
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    logger.info(f"User {user_id} role set to {update.role} by admin {admin.user_id}")
    audit_logger.log_security_event("role_changed", admin.user_id, {"target_user_id": user_id, "role": update.role})
    return user
