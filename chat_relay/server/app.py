"""中继的 HTTP 接口（aiohttp）。

路由：
    - POST /chat: 转发一轮对话
    - GET /chat/test: 后端连通性测试
    - GET /chat/config: 当前运行配置
    - GET /health: 健康检查
    - GET /: 接口说明

中继管道是同步的（httpx 同步客户端），处理器通过 asyncio.to_thread
把它放到工作线程执行，后端调用只阻塞当前请求。
"""

from __future__ import annotations

import asyncio
import json
import time
from datetime import datetime, timezone

from aiohttp import web

from chat_relay import __version__
from chat_relay.api.service import ChatRelayService
from chat_relay.infrastructure.logging.logger import logger

SERVICE_KEY = web.AppKey("service", ChatRelayService)
STARTED_AT_KEY = web.AppKey("started_at", float)

MAX_BODY_BYTES = 10 * 1024 * 1024


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    """HTTP 错误（404、405、413 等）与处理器中逃逸的异常都以 JSON 返回。"""
    try:
        return await handler(request)
    except web.HTTPNotFound:
        return web.json_response(
            {"error": "Not Found", "message": f"Route {request.path_qs} not found"},
            status=404,
        )
    except web.HTTPMethodNotAllowed as exc:
        return web.json_response(
            {"error": exc.reason, "message": f"Method {request.method} not allowed for route {request.path_qs}"},
            status=exc.status,
            headers={"Allow": exc.headers.get("Allow", "")},
        )
    except web.HTTPException as exc:
        if exc.status < 400:
            raise
        return web.json_response({"error": exc.reason, "message": exc.text or exc.reason}, status=exc.status)
    except Exception as exc:
        logger.exception("Unhandled error while serving %s %s", request.method, request.path)
        service = request.app[SERVICE_KEY]
        message = str(exc) if service.settings.expose_error_details else "Something went wrong"
        return web.json_response({"error": "Internal Server Error", "message": message}, status=500)


async def handle_chat(request: web.Request) -> web.Response:
    service = request.app[SERVICE_KEY]
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        # 无法解析的请求体按缺少 message 处理
        body = None
    status, payload = await asyncio.to_thread(service.handle_chat, body)
    return web.json_response(payload, status=status)


async def handle_chat_test(request: web.Request) -> web.Response:
    service = request.app[SERVICE_KEY]
    status, payload = await asyncio.to_thread(service.probe_backend)
    return web.json_response(payload, status=status)


async def handle_chat_config(request: web.Request) -> web.Response:
    return web.json_response(request.app[SERVICE_KEY].describe_config())


async def handle_health(request: web.Request) -> web.Response:
    settings = request.app[SERVICE_KEY].settings
    return web.json_response(
        {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - request.app[STARTED_AT_KEY], 3),
            "environment": settings.relay_env,
            "mistralEndpoint": settings.mistral_api_url,
        }
    )


async def handle_root(request: web.Request) -> web.Response:
    return web.json_response(
        {
            "message": "Chat Relay Backend API",
            "version": __version__,
            "endpoints": {"health": "/health", "chat": "/chat"},
        }
    )


def create_app(service: ChatRelayService, client_max_size: int = MAX_BODY_BYTES) -> web.Application:
    """创建 aiohttp 应用并注册全部路由。"""
    app = web.Application(middlewares=[error_middleware], client_max_size=client_max_size)
    app[SERVICE_KEY] = service
    app[STARTED_AT_KEY] = time.monotonic()

    app.router.add_post("/chat", handle_chat)
    app.router.add_get("/chat/test", handle_chat_test)
    app.router.add_get("/chat/config", handle_chat_config)
    app.router.add_get("/health", handle_health)
    app.router.add_get("/", handle_root)
    return app
