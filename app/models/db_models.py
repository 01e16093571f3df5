from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text

from app.db import Base


class KVEntry(Base):
    __tablename__ = "kv_entries"

    key = Column(String(512), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
