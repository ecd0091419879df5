# schemas/common.py
from pydantic import BaseModel


class SuccessResponse(BaseModel):
    """Generic acknowledgement."""
    success: bool = True
    message: str = ""
