from sqlalchemy import create_engine, event, Column, String, Text, DateTime, ForeignKey, Enum, Index, JSON
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from datetime import datetime, timezone
from tutorhub.config import get_settings
import sqlite3
import uuid
import enum

"""
Database models for the tutoring platform.
Includes models for users, tutors, tutoring sessions, learning materials,
lecture videos, feedback and the server-side auth session table.
Uses SQLAlchemy ORM with PostgreSQL/SQLite backend.
"""

# Base class for ORM models
Base = declarative_base()

# Enum for user roles
class UserRole(str, enum.Enum):
    STUDENT = "student"
    ADMIN = "admin"

class SessionStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    IN_PROGRESS = "in_progress"

class FeedbackStatus(str, enum.Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    RESOLVED = "resolved"

def _enum_values(enum_cls):
    return [member.value for member in enum_cls]

def generate_uuid() -> str:
    """Generate a string UUID."""
    return str(uuid.uuid4()).lower()

def utcnow() -> datetime:
    """Current time as naive UTC, the format every timestamp column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

# Auth session storage. The cookie only carries the sid.
class AuthSession(Base):
    __tablename__ = 'sessions'
    sid = Column(String(128), primary_key=True)
    sess = Column(JSON, nullable=False)
    expire = Column(DateTime, nullable=False)

    __table_args__ = (
        Index('IDX_session_expire', 'expire'),
    )

    def __repr__(self):
        return f"<AuthSession(sid={self.sid[:8]}..., expire={self.expire})>"

# User Model
class User(Base):
    """User model with role-based access control."""
    __tablename__ = 'users'
    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, nullable=True, index=True)
    password = Column(String(255), nullable=True)  # passlib hash, only for local accounts
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    profile_image_url = Column(String, nullable=True)
    role = Column(Enum(UserRole, name='user_role', values_callable=_enum_values),
                  default=UserRole.STUDENT, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        """String representation of the User object."""
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

# Tutor Model
class Tutor(Base):
    """Tutor directory entry. Tutors are managed by admins and do not log in."""
    __tablename__ = 'tutors'
    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    specialty = Column(String(255), nullable=False)
    bio = Column(Text)
    profile_image_url = Column(String)
    hourly_rate = Column(String(50))
    availability = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Tutor(id={self.id}, name={self.name}, specialty={self.specialty})>"

# Tutoring Session Model
class TutoringSession(Base):
    __tablename__ = 'tutoring_sessions'
    id = Column(String(36), primary_key=True, default=generate_uuid)
    student_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    tutor_id = Column(String(36), ForeignKey('tutors.id', ondelete='CASCADE'), nullable=False)
    subject = Column(String(255), nullable=False)
    scheduled_date = Column(DateTime, nullable=False)
    duration = Column(String(50), nullable=False)
    status = Column(Enum(SessionStatus, name='session_status', values_callable=_enum_values),
                    default=SessionStatus.SCHEDULED, nullable=False)
    notes = Column(Text)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        """String representation of the TutoringSession object."""
        return f"<TutoringSession(id={self.id}, student_id={self.student_id}, tutor_id={self.tutor_id}, status={self.status})>"

class LearningMaterial(Base):
    __tablename__ = 'learning_materials'
    id = Column(String(36), primary_key=True, default=generate_uuid)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    subject = Column(String(255), nullable=False)
    file_url = Column(String, nullable=False)
    file_type = Column(String(100))
    uploaded_by_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<LearningMaterial(id={self.id}, title={self.title})>"

class LectureVideo(Base):
    __tablename__ = 'lecture_videos'
    id = Column(String(36), primary_key=True, default=generate_uuid)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    subject = Column(String(255), nullable=False)
    video_url = Column(String, nullable=False)
    thumbnail_url = Column(String)
    duration = Column(String(50))
    tutor_id = Column(String(36), ForeignKey('tutors.id', ondelete='SET NULL'), nullable=True)
    uploaded_by_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<LectureVideo(id={self.id}, title={self.title}, tutor_id={self.tutor_id})>"

class Feedback(Base):
    __tablename__ = 'feedback'
    id = Column(String(36), primary_key=True, default=generate_uuid)
    student_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    subject = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    rating = Column(String(10))
    status = Column(Enum(FeedbackStatus, name='feedback_status', values_callable=_enum_values),
                    default=FeedbackStatus.PENDING, nullable=False)
    admin_response = Column(Text)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Feedback(id={self.id}, student_id={self.student_id}, status={self.status})>"

# Add indexes for frequently queried columns
Index('idx_user_role', User.role)
Index('idx_session_student_date', TutoringSession.student_id, TutoringSession.scheduled_date)
Index('idx_feedback_student', Feedback.student_id)

# SQLite ignores ON DELETE rules unless foreign keys are switched on per connection
@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

def build_engine(url: str) -> Engine:
    """Create an engine for the given URL with pool settings that suit the backend."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # Share the single in-memory database between all sessions
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=False, **kwargs)
    return create_engine(
        url,
        echo=False,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_pre_ping=True
    )

# Database setup
DATABASE_URL = get_settings().db_url
engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def init_db(bind: Engine = engine) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(bind=bind)

# Dependency to get DB session
def get_db():
    """Provides a transactional scope around a series of operations."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
