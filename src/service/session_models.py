from typing import Optional

from pydantic import BaseModel


class VisitSession(BaseModel):
    visits: int = 0
    last_path: Optional[str] = None
