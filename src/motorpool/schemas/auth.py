"""Pydantic schemas for registration and authentication."""

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    username: str = Field(..., min_length=1, max_length=100, pattern=r"^\S(.*\S)?$")
    password: str = Field(..., min_length=1, max_length=200)


class TokenData(BaseModel):
    jwt: str
