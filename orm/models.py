import logging

from sqlalchemy import Column, ForeignKey, Index, Integer, String, Text, create_engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

from utils.channel_models import parse_models_json
from utils.config_helper import get_database_url
from utils.enums import ChannelStatus
from utils.time_utils import now_iso

logger = logging.getLogger(__name__)

DATABASE_URL = get_database_url()

# Create the SQLAlchemy engine
engine = create_engine(DATABASE_URL)

# Create a configured "Session" class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create a Base class for the models to inherit from
Base = declarative_base()


class Channel(Base):
    __tablename__ = "channels"
    __table_args__ = (Index("ix_channels_status", "status"),)
    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    base_url = Column(String(1024), nullable=False)
    # legacy single key, used when the channel has no rows in channel_tokens
    api_key = Column(String(1024))
    status = Column(String(20), nullable=False, default=ChannelStatus.ACTIVE.value)
    models_json = Column(Text)
    test_time = Column(Integer)
    response_time_ms = Column(Integer)
    created_at = Column(String(32), nullable=False, default=now_iso)
    updated_at = Column(String(32), nullable=False, default=now_iso)

    tokens = relationship("ChannelTokenRow", back_populates="channel", cascade="all, delete-orphan")

    @property
    def models(self) -> list[str]:
        """Model IDs stored by the last successful test."""
        return parse_models_json(self.models_json)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "base_url": self.base_url,
            "status": self.status,
            "models_json": self.models_json,
            "models": self.models,
            "test_time": self.test_time,
            "response_time_ms": self.response_time_ms,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class ChannelTokenRow(Base):
    __tablename__ = "channel_tokens"
    __table_args__ = (Index("ix_channel_tokens_channel_id", "channel_id"),)
    id = Column(String(64), primary_key=True)
    channel_id = Column(String(64), ForeignKey("channels.id"), nullable=False)
    name = Column(String(255))
    api_key = Column(String(1024), nullable=False)
    created_at = Column(String(32), nullable=False, default=now_iso)
    updated_at = Column(String(32), nullable=False, default=now_iso)

    channel = relationship("Channel", back_populates="tokens")


def init_db(bind=None) -> None:
    """Create the channel tables if they do not exist yet."""
    bind = bind if bind is not None else engine
    Base.metadata.create_all(bind=bind)
    logger.info(f"Channel tables ready on {bind.url}")
