"""
Creator model — one row per Instagram account, unique by username.
"""
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, Float, Text, Boolean, DateTime

from creator_scout.database import Base


def utcnow():
    return datetime.now(timezone.utc)


# Writable profile columns, in export/display order. id and the two
# timestamps are managed by the store.
CREATOR_FIELDS = [
    'username',
    'full_name',
    'profile_url',
    'pk',
    'follower_count',
    'following_count',
    'media_count',
    'is_verified',
    'is_business',
    'is_private',
    'category',
    'bio',
    'external_url',
    'profile_pic_url',
    'profile_pic_local',
    'bio_hashtags',
    'bio_mentions',
    'engagement_rate',
    'source_keyword',
    'search_score',
    'profile_type',
]


class Creator(Base):
    __tablename__ = 'creators'

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(Text, nullable=False, unique=True)
    full_name = Column(Text, default='')
    profile_url = Column(Text, default='')
    pk = Column(Text, default='')  # Instagram numeric user id, kept as text
    follower_count = Column(Integer, default=0)
    following_count = Column(Integer, default=0)
    media_count = Column(Integer, default=0)
    is_verified = Column(Boolean, default=False)
    is_business = Column(Boolean, default=False)
    is_private = Column(Boolean, default=False)
    category = Column(Text, default='')
    bio = Column(Text, default='')
    external_url = Column(Text, default='')
    profile_pic_url = Column(Text, default='')
    profile_pic_local = Column(Text, default='')
    bio_hashtags = Column(Text, default='')
    bio_mentions = Column(Text, default='')
    engagement_rate = Column(Float, default=0.0)  # fraction, 0.052 == 5.2%
    source_keyword = Column(Text, default='')
    search_score = Column(Float, default=0.0)
    profile_type = Column(Text, default='')
    scraped_at = Column(DateTime(timezone=True), default=utcnow)
    last_updated = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def to_dict(self):
        data = {'id': self.id}
        for name in CREATOR_FIELDS:
            data[name] = getattr(self, name)
        data['scraped_at'] = self.scraped_at.isoformat() if self.scraped_at else None
        data['last_updated'] = self.last_updated.isoformat() if self.last_updated else None
        return data
