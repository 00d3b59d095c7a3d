# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request contracts.

Every entry point turns its raw body into one of these via ``parse(raw)``,
which never raises on bad input.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

T = TypeVar("T", bound="Contract")

USERNAME_RE = re.compile(r"[a-zA-Z0-9_]+")
HANDLE_RE = re.compile(r"[a-zA-Z0-9._]+")
EMAIL_RE = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")


@dataclass(frozen=True)
class Parsed(Generic[T]):
    value: Optional[T] = None
    errors: List[Dict[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.value is not None and not self.errors


def _encodable(v: str) -> bool:
    try:
        v.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _not_blank(v: str, label: str) -> str:
    if not v.strip():
        raise ValueError(f"{label} cannot be empty or just spaces")
    return v


class Contract(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @classmethod
    def parse(cls: Type[T], raw: Any) -> Parsed[T]:
        try:
            return Parsed(value=cls.model_validate(raw if raw is not None else {}))
        except ValidationError as e:
            errors = [
                {
                    "field": ".".join(str(p) for p in err.get("loc", ())) or "body",
                    "message": str(err.get("msg", "")).removeprefix("Value error, "),
                }
                for err in e.errors()
            ]
            return Parsed(errors=errors)


class RegisterRequest(Contract):
    username: str = Field(min_length=3, max_length=20)
    password: str = Field(min_length=6)
    display_handle: str = Field(alias="instagramHandle", min_length=1, max_length=30)

    @field_validator("username")
    @classmethod
    def _username(cls, v: str) -> str:
        _not_blank(v, "Username")
        if not USERNAME_RE.fullmatch(v):
            raise ValueError("Username can only contain letters, numbers, and underscores")
        return v

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if not _encodable(v):
            raise ValueError("Password contains invalid characters")
        return _not_blank(v, "Password")

    @field_validator("display_handle")
    @classmethod
    def _handle(cls, v: str) -> str:
        _not_blank(v, "Instagram handle")
        if not HANDLE_RE.fullmatch(v):
            raise ValueError("Instagram handle can only contain letters, numbers, dots, and underscores")
        if v.startswith(".") or v.endswith("."):
            raise ValueError("Instagram handle cannot start or end with a dot")
        if ".." in v:
            raise ValueError("Instagram handle cannot have consecutive dots")
        return v


class LoginRequest(Contract):
    """Deliberately lenient: blank fields reach authenticate() and fail like bad credentials."""

    username: str = ""
    password: str = ""
    remember_me: bool = Field(default=False, alias="rememberMe")

    @field_validator("username", "password", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return v if isinstance(v, str) and _encodable(v) else ""

    @field_validator("remember_me", mode="before")
    @classmethod
    def _strict_true(cls, v: Any) -> bool:
        return v is True


class ContactMessageRequest(Contract):
    name: str = Field(min_length=1)
    email: str
    message: str = Field(min_length=10)

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _not_blank(v, "Name")

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        if not EMAIL_RE.fullmatch(v.strip()):
            raise ValueError("Please enter a valid email address")
        return v.strip()

    @field_validator("message")
    @classmethod
    def _message(cls, v: str) -> str:
        return _not_blank(v, "Message")
