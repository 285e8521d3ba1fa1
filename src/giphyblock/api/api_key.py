"""REST endpoints that read and write the site's Giphy API key."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from giphyblock.api.deps import get_db, require_permission
from giphyblock.config import API_KEY_OPTION, REST_NAMESPACE, get_option, update_option
from giphyblock.db.models import User
from giphyblock.permissions import EDIT_POSTS
from giphyblock.validators import check_api_key

router = APIRouter(prefix=f"/{REST_NAMESPACE}", tags=["api-key"])
log = logging.getLogger(__name__)

# Methods accepted by the write handler
EDITABLE = ["POST", "PUT", "PATCH"]


@router.get("/api-key")
async def get_api_key(
    db: AsyncSession = Depends(get_db),
    _: User = require_permission(EDIT_POSTS),
) -> str:
    return await get_option(db, API_KEY_OPTION, "")


@router.api_route("/api-key", methods=EDITABLE, status_code=201)
async def update_api_key(
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = require_permission(EDIT_POSTS),
) -> str:
    raw = await request.body()
    try:
        value = check_api_key(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise HTTPException(
            status_code=422,
            detail={"error": {"code": "VALIDATION_ERROR", "message": str(e)}},
        )
    stored = await update_option(db, API_KEY_OPTION, value)
    await db.commit()
    log.info("Giphy API key updated by user %d", user.id)
    return stored
