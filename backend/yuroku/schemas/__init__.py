"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    AccountDeleteSchema,
    LoginSchema,
    LogoutSchema,
    PasswordChangeSchema,
    ProfileUpdateSchema,
    RefreshSchema,
    RegisterSchema,
    TokenResponseSchema,
    UserSchema,
)
from .common import CamelCaseAliasSchema, MetaSchema, build_meta
from .log_entry import (
    ImageSchema,
    ImageUploadFormSchema,
    LogEntryCreateSchema,
    LogEntrySchema,
    LogEntryUpdateSchema,
    LogFilterQuerySchema,
)

__all__ = [
    "AccountDeleteSchema",
    "LoginSchema",
    "LogoutSchema",
    "PasswordChangeSchema",
    "ProfileUpdateSchema",
    "RefreshSchema",
    "RegisterSchema",
    "TokenResponseSchema",
    "UserSchema",
    "CamelCaseAliasSchema",
    "MetaSchema",
    "build_meta",
    "ImageSchema",
    "ImageUploadFormSchema",
    "LogEntryCreateSchema",
    "LogEntrySchema",
    "LogEntryUpdateSchema",
    "LogFilterQuerySchema",
]
