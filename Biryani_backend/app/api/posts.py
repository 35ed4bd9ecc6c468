import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import JSONResponse

from app.context import AppContext, get_context
from app.ws import POST_CREATED
from schemas.post import PostCreate, PostResponse

router = APIRouter()
logger = logging.getLogger("biryani.api")


@router.get("/posts", response_model=List[PostResponse])
async def list_posts(response: Response, verified: bool = False, ctx: AppContext = Depends(get_context)):
    result = await ctx.store.list_posts()
    response.headers["X-Store-Status"] = result.status.value
    posts = result.value or []
    if verified:
        posts = [p for p in posts if p.verified]
    return posts


@router.post("/posts", status_code=201, response_model=PostResponse)
async def create_post(payload: PostCreate, response: Response, ctx: AppContext = Depends(get_context)):
    if not (payload.place_name or "").strip():
        raise HTTPException(status_code=400, detail="place_name is required")
    result = await ctx.store.create_post(payload)
    if result.failed:
        logger.error("POST_CREATE_FAILED id=%s error=%s", payload.id, result.error)
        return JSONResponse(status_code=500, content={
            "error": "Failed to create post",
            "details": str(result.error),
        }, headers={"X-Store-Status": result.status.value})
    response.headers["X-Store-Status"] = result.status.value
    post = result.value
    # 内存兜底的帖子也会出现在列表里，同样广播
    await ctx.manager.publish(POST_CREATED, post.model_dump(mode="json"))
    return post
