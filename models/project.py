from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from database import Base


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(64), primary_key=True, index=True)
    brokerage_id = Column(String(64), nullable=False, index=True)
    name = Column(String(256), nullable=False)
    description = Column(Text, nullable=True)
    project_type = Column(String(64), nullable=True)
    applicant_count = Column(String(32), nullable=False, default="one_applicant")
    has_guarantor = Column(Boolean, nullable=False, default=False)
    status = Column(String(32), nullable=False, default="active")
    # Generation idempotence marker
    checklist_generated_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    documents = relationship("ProjectDocument", back_populates="project", cascade="all, delete-orphan")


class ProjectDocument(Base):
    """Reference to an uploaded file; the file itself lives in external storage."""

    __tablename__ = "project_documents"

    id = Column(String(64), primary_key=True, index=True)
    project_id = Column(String(64), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    item_id = Column(String(64), ForeignKey("required_items.id", ondelete="SET NULL"), nullable=True, index=True)
    participant_designation = Column(String(32), nullable=True)
    file_name = Column(String(512), nullable=False)
    file_path = Column(String(1024), nullable=False)
    file_size = Column(Integer, nullable=True)
    mime_type = Column(String(128), nullable=True)
    status = Column(String(32), nullable=False, default="submitted")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    project = relationship("Project", back_populates="documents")
