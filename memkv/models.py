"""Request and response models for the HTTP API."""

from typing import List, Optional

from pydantic import BaseModel, Field

from memkv.storage_engine import MAX_TTL_SECONDS


class SetStringRequest(BaseModel):
    """Request model for creating a string key."""
    key: str = Field(..., description="Key to store")
    value: str = Field(..., description="String value")
    ttl: Optional[float] = Field(None, allow_inf_nan=False, le=MAX_TTL_SECONDS, description="Time-to-live in seconds; absent or <= 0 never expires")


class UpdateStringRequest(BaseModel):
    """Request model for replacing a string value."""
    key: str = Field(..., description="Existing key")
    value: str = Field(..., description="New string value")


class StringResponse(BaseModel):
    value: str
    expires_at: Optional[str] = Field(None, description="ISO-8601 expiry, omitted when the key never expires")


class SetListRequest(BaseModel):
    """Request model for creating a list key."""
    key: str = Field(..., description="Key to store")
    list: List[str] = Field(..., description="Initial list contents, head first")
    ttl: Optional[float] = Field(None, allow_inf_nan=False, le=MAX_TTL_SECONDS, description="Time-to-live in seconds; absent or <= 0 never expires")


class UpdateListRequest(BaseModel):
    """Request model for replacing a list."""
    key: str = Field(..., description="Existing key")
    list: List[str] = Field(..., description="New list contents, head first")


class ListResponse(BaseModel):
    list: List[str]
    expires_at: Optional[str] = Field(None, description="ISO-8601 expiry, omitted when the key never expires")


class PopResponse(BaseModel):
    value: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    string_keys: int
    list_keys: int
