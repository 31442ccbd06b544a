"""Pydantic response models (DTOs) for FastAPI endpoints."""

from pydantic import BaseModel


class ErrorDTO(BaseModel):
    detail: str
    error_type: str
    request_id: str | None = None


class HealthResponseDTO(BaseModel):
    status: str
    timestamp: str
    version: str = "1.0.0"
    cache_backend: str
