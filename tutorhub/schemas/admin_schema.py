from tutorhub.schemas.base import ApiModel

class AdminStatsResponse(ApiModel):
    """Admin dashboard data"""
    total_students: int
    total_tutors: int
    total_sessions: int
    sessions_today: int
