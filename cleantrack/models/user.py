from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional, List
from enum import Enum

# ──────────────────────────────────────────────────────────────────────────────
# Enums
# ──────────────────────────────────────────────────────────────────────────────

class UserRole(str, Enum):
    ADMIN = "admin"
    ROUTEMAN = "routeman"    # route manager, sees every report form
    OPERATOR = "operator"    # limited to the forms enabled in permissions
    DEALER = "dealer"        # reads reports of assigned operators
    VIEWER = "viewer"


# ──────────────────────────────────────────────────────────────────────────────
# Stored permission flags (camelCase, same keys as the database nodes)
# ──────────────────────────────────────────────────────────────────────────────

class UserPermissions(BaseModel):
    model_config = ConfigDict(extra="allow")

    iceCream: bool = False
    fridge: bool = False


# ──────────────────────────────────────────────────────────────────────────────
# Request payloads
# ──────────────────────────────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1)
    role: UserRole
    permissions: Optional[UserPermissions] = None
    assignedOperators: Optional[List[str]] = None


class UserUpdate(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    role: Optional[UserRole] = None
    permissions: Optional[UserPermissions] = None
    assignedOperators: Optional[List[str]] = None
