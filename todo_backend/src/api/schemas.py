from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.

    `title` is checked by the create operation rather than by the schema so that
    a missing or blank title is reported as a 400 "Title is required".
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy milk",
                "description": "Semi-skimmed, two litres",
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Short title for the todo item (required)")
    description: Optional[str] = Field(default=None, description="Optional detailed description")


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Schema for updating an existing Todo item.
    All fields are optional; only provided fields will be updated.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy milk and bread",
                "completed": True,
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Short title for the todo item")
    description: Optional[str] = Field(default=None, description="Detailed description; null clears it")
    completed: Optional[bool] = Field(default=None, description="Completion status flag")


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item. Serialized with camelCase keys.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "6650f1c2a7b4e3d2c1b0a998",
                "title": "Buy milk",
                "description": "",
                "read": False,
                "completed": False,
                "ownerId": "6650f1a0a7b4e3d2c1b0a990",
                "createdAt": "2025-01-25T10:15:30.123456Z",
                "updatedAt": "2025-01-26T09:00:00.000001Z",
            }
        },
    )

    id: str = Field(..., description="Unique identifier of the todo item")
    title: str = Field(..., description="Short title for the todo item")
    description: str = Field(default="", description="Detailed description")
    read: bool = Field(..., description="Whether the owner has marked the item as read")
    completed: bool = Field(..., description="Completion status flag")
    owner_id: str = Field(..., description="Id of the owning user")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


# PUBLIC_INTERFACE
class MessageOut(BaseModel):
    """Plain confirmation message."""

    message: str


# PUBLIC_INTERFACE
class Credentials(BaseModel):
    """Username/password pair used for registration and login."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"username": "alice", "password": "correct horse battery staple"}}
    )

    username: str = Field(..., description="Case-sensitive account name")
    password: str = Field(..., description="Plaintext password; only its bcrypt hash is stored")


# PUBLIC_INTERFACE
class UserOut(BaseModel):
    """Public view of an account."""

    id: str = Field(..., description="Unique identifier of the user")
    username: str = Field(..., description="Account name")


# PUBLIC_INTERFACE
class TokenOut(BaseModel):
    """Result of a successful API login."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    token: str = Field(..., description="Bearer token for the Authorization header")
    token_type: str = Field(default="bearer", description="Token scheme")
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user: UserOut
