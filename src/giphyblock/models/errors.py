from giphyblock.models.base import BlockModel


class ErrorResponse(BlockModel):
    code: str
    message: str
    missing_permission: str | None = None


class ErrorEnvelope(BlockModel):
    error: ErrorResponse
