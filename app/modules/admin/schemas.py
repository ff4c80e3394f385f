from pydantic import BaseModel
from typing import Dict


class CleanupResponse(BaseModel):
    message: str
    deleted: Dict[str, int]
