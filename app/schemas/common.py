from typing import List, Optional

from pydantic import BaseModel


class ApiResponse(BaseModel):
    status: str
    message: Optional[str] = None


class ValidationApiResponse(ApiResponse):
    status: str = "ValidationError"
    errors: List[str] = []


class ErrorApiResponse(ApiResponse):
    status: str = "Error"
