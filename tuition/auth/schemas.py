from typing import Optional

from pydantic import BaseModel


class CurrentUser(BaseModel):
    """Authenticated caller as carried by the access token. Recorded on activity entries."""

    username: str
    role: Optional[str] = None
