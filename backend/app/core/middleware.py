"""
HTTP 中间件
"""

import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.services.upload import TOO_LARGE_MSG

# multipart 边界和表单头的余量，精确的文件大小由上传组件再校验
MULTIPART_OVERHEAD = 64 * 1024


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        return response


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = rid
        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """按 Content-Length 拒绝过大的请求体，上传接口单独计算上限"""

    def __init__(self, app, max_json_bytes: int, max_upload_bytes: int, upload_path: str = "/api/upload") -> None:
        super().__init__(app)
        self.max_json_bytes = int(max_json_bytes)
        self.max_upload_bytes = int(max_upload_bytes)
        self.upload_path = upload_path

    async def dispatch(self, request: Request, call_next):
        length = request.headers.get("content-length")
        if length and length.isdigit():
            size = int(length)
            if request.url.path == self.upload_path:
                if size > self.max_upload_bytes + MULTIPART_OVERHEAD:
                    return JSONResponse(status_code=400, content={"code": 1, "msg": TOO_LARGE_MSG})
            elif size > self.max_json_bytes:
                return JSONResponse(status_code=413, content={"code": 1, "msg": "request entity too large"})
        return await call_next(request)
