from sqlalchemy.orm import declarative_base
from sqlalchemy import Column, String, Text, DateTime, JSON
Base = declarative_base()

class DocumentJob(Base):
    __tablename__ = "document_jobs"
    job_id = Column(String, primary_key=True, index=True)
    status = Column(String, nullable=False, default="pending")
    prompt = Column(Text, nullable=False)
    html = Column(Text, nullable=True)
    project_id = Column(String, nullable=True)
    error = Column(Text, nullable=True)
    result = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    def to_dict(self) -> dict:
        return {
            "job_id": self.job_id,
            "status": self.status,
            "prompt": self.prompt,
            "html": self.html,
            "project_id": self.project_id,
            "error": self.error,
            "result": self.result,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
