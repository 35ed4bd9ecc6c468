from fastapi import APIRouter, Depends, HTTPException, Response

from app.context import AppContext, get_context
from app.ws import POST_VOTED
from schemas.vote import VoteCreate, VoteResponse

router = APIRouter()


@router.post("/votes", response_model=VoteResponse)
async def cast_vote(payload: VoteCreate, response: Response, ctx: AppContext = Depends(get_context)):
    if not payload.post_id or not payload.user_id:
        raise HTTPException(status_code=400, detail="post_id and user_id are required")
    if payload.vote_type not in (0, 1):
        raise HTTPException(status_code=400, detail="vote_type must be 0 or 1")
    result = await ctx.store.cast_vote(payload.post_id, payload.user_id, payload.vote_type)
    response.headers["X-Store-Status"] = result.status.value
    if result.ok:
        await ctx.manager.publish(POST_VOTED, result.value.model_dump(mode="json"))
    return result.value
