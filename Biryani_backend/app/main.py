import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, WebSocket
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from app.api import posts as posts_api
from app.api import reports as reports_api
from app.api import votes as votes_api
from app.config import Settings, settings as default_settings
from app.context import AppContext
from app.utils.log import setup_logging

logger = logging.getLogger("biryani.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    ctx: AppContext = app.state.context
    await ctx.start()
    try:
        yield
    finally:
        await ctx.close()


async def websocket_events(websocket: WebSocket):
    # 仅服务端推送，客户端发来的内容（心跳等）一律忽略
    manager = websocket.app.state.context.manager
    try:
        await manager.connect(websocket)
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        manager.disconnect(websocket)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    # 请求体类型不对与缺字段一样按 400 处理
    logger.info("BAD_REQUEST path=%s errors=%d", request.url.path, len(exc.errors()))
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Biryani Map", lifespan=lifespan)
    app.state.context = AppContext(settings=settings)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # 配置CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 注册路由
    app.include_router(posts_api.router, prefix="/api", tags=["posts"])
    app.include_router(votes_api.router, prefix="/api", tags=["votes"])
    app.include_router(reports_api.router, prefix="/api", tags=["reports"])

    @app.get("/")
    async def root():
        return {"message": "Biryani Map API"}

    if settings.REALTIME_ENABLED:
        app.add_api_websocket_route("/ws", websocket_events)
    else:
        logger.info("REALTIME_DISABLED websocket route not mounted")

    return app


app = create_app()
