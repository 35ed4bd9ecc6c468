from fastapi import APIRouter, Depends, HTTPException, Response

from app.context import AppContext, get_context
from schemas.report import ReportAck, ReportCreate

router = APIRouter()


@router.post("/reports", status_code=201, response_model=ReportAck)
async def create_report(payload: ReportCreate, response: Response, ctx: AppContext = Depends(get_context)):
    if not payload.post_id:
        raise HTTPException(status_code=400, detail="post_id is required")
    result = await ctx.store.create_report(payload.post_id, payload.user_id, payload.reason)
    response.headers["X-Store-Status"] = result.status.value
    return result.value
