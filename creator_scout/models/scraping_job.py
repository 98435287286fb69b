"""
ScrapingJob model — one row per Instagram search request.
"""
from sqlalchemy import Column, Integer, Text, DateTime
from sqlalchemy.sql import func

from creator_scout.database import Base


class ScrapingJob(Base):
    __tablename__ = 'scraping_jobs'

    id = Column(Integer, primary_key=True, autoincrement=True)
    search_query = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default='running')
    total_found = Column(Integer, default=0)
    total_saved = Column(Integer, default=0)
    error_message = Column(Text, nullable=True)
    started_at = Column(DateTime(timezone=True), server_default=func.now())
    completed_at = Column(DateTime(timezone=True), nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'search_query': self.search_query,
            'status': self.status,
            'total_found': self.total_found or 0,
            'total_saved': self.total_saved or 0,
            'error_message': self.error_message,
            'started_at': self.started_at.isoformat() if self.started_at else None,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
        }
