"""
RefreshToken model: the ledger of issued refresh tokens.
Fields:
- token (unique) - the signed refresh JWT as handed to the client
- user_id (String(36)) - FK to users.id
- expires_at - absolute expiry, same interval as the token's own exp claim
- created_at
A row is usable only while it exists and expires_at is in the future.
"""
from sqlalchemy import Column, String, ForeignKey
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base, UTCDateTime


class RefreshToken(BaseModel, Base):
    __tablename__ = "refresh_tokens"

    token = Column(String(512), nullable=False, unique=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(UTCDateTime(timezone=True), nullable=False, index=True)

    user = relationship("User", back_populates="refresh_tokens")

    def __repr__(self):
        return f"<RefreshToken id={self.id} user={self.user_id}>"
