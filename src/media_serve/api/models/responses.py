"""Response models for the server."""

from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error response model."""
    success: bool = False
    error: Dict[str, Any]
    timestamp: datetime
