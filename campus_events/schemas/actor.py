from typing import Optional
from pydantic import BaseModel

class Actor(BaseModel):
    """Authenticated caller, as attached by the identity layer."""
    sub: str
    email: str
    role: str
    student_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
