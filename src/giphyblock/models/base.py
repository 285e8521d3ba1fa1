from pydantic import BaseModel, ConfigDict


class BlockModel(BaseModel):
    """Base for response and value models: immutable, ignores unknown fields."""

    model_config = ConfigDict(frozen=True, extra="ignore")
