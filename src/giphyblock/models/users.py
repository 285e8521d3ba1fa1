from pydantic import BaseModel

from giphyblock.models.base import BlockModel


class UserResponse(BlockModel):
    user_id: int
    username: str
    display_name: str | None
    roles: list[str]
    capabilities: list[str]


class RoleAssignRequest(BaseModel):
    role: str
