import uuid
from sqlalchemy import Boolean, Column, String, Text, Integer, DateTime, func, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from .database import Base

class ResponseSession(Base):
    __tablename__ = "sessions"
    # server defaults such as created_at are fetched during flush
    __mapper_args__ = {"eager_defaults": True}

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    completed = Column(Boolean, nullable=False, default=False)
    # bumped by every write; writers only succeed against the count they read
    response_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    completed_at = Column(DateTime(timezone=True), nullable=True)

    responses = relationship(
        "UserResponse",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="UserResponse.position",
    )

    def __repr__(self):
        return f"<ResponseSession(id={self.id}, completed={self.completed})>"

class UserResponse(Base):
    __tablename__ = "responses"
    __table_args__ = (UniqueConstraint("session_id", "dilemma_id", name="uq_response_session_dilemma"),)
    __mapper_args__ = {"eager_defaults": True}

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(String, ForeignKey("sessions.id"), nullable=False, index=True)
    # order in which the dilemma was answered within the session
    position = Column(Integer, nullable=False)
    dilemma_id = Column(String, nullable=False)
    chosen_option = Column(String(1), nullable=False)
    reasoning = Column(Text, nullable=True)
    response_time = Column(Integer, nullable=True)
    perceived_difficulty = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    session = relationship("ResponseSession", back_populates="responses")

    def __repr__(self):
        return f"<UserResponse(id={self.id}, session_id='{self.session_id}', dilemma_id='{self.dilemma_id}')>"
