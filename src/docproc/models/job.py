from sqlalchemy import Column, String, Integer, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin

class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, nullable=False, unique=True, index=True)

class DocumentProcessResult(Base, TimestampMixin):
    __tablename__ = "document_process_results"
    __table_args__ = (
        Index("ix_document_process_results_document_job_type", "document_id", "job_type"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    document_id = Column(String, nullable=False)
    job_type = Column(String, nullable=False)
    result = Column(JSON)  # artifact references written by the producing worker

    # Relationships
    job_links = relationship("JobToDocumentProcessResult", back_populates="result", cascade="all, delete-orphan")

class JobToDocumentProcessResult(Base, TimestampMixin):
    __tablename__ = "job_to_document_process_results"

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(String, nullable=False, index=True)
    document_process_result_id = Column(
        Integer, ForeignKey("document_process_results.id"), nullable=False, index=True
    )

    # Relationships
    result = relationship("DocumentProcessResult", back_populates="job_links")

class UploadJob(Base, TimestampMixin):
    __tablename__ = "upload_jobs"

    job_id = Column(String, primary_key=True)
    job_type = Column(String, nullable=False)
    document_id = Column(String, nullable=False, index=True)
