from typing import Annotated

from pydantic import AfterValidator, BaseModel

from giphyblock.config import str_limit
from giphyblock.models.base import BlockModel


# --- Register ---


class RegisterRequest(BaseModel):
    username: Annotated[str, AfterValidator(str_limit(min_attr="username_min", max_attr="username_max"))]
    password: Annotated[str, AfterValidator(str_limit(min_attr="password_min", max_attr="password_max"))]
    display_name: Annotated[str, AfterValidator(str_limit(max_attr="display_name_max"))] | None = None


class RegisterResponse(BlockModel):
    user_id: int
    token: str


# --- Login ---


class LoginRequest(BaseModel):
    username: Annotated[str, AfterValidator(str_limit(max_attr="username_max"))]
    password: Annotated[str, AfterValidator(str_limit(max_attr="password_max"))]


class LoginResponse(BlockModel):
    token: str
    user_id: int
    display_name: str | None
    roles: list[int]
