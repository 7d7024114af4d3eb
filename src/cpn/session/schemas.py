"""Session response models."""

from cpn.schemas import CamelModel


class SessionResponse(CamelModel):
    user_id: str
    session_token: str
