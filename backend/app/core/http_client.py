"""
公告 API 客户端
统一的请求入口：返回解析后的 {code, msg, data}，响应不是 JSON 时返回 {code: 1, msg: 'api not json'}
"""

import json
from typing import Any, Dict, Iterable, Optional

import httpx

DEFAULT_BASE_URL = "http://127.0.0.1:3000"
NOT_JSON = {"code": 1, "msg": "api not json"}


class NoticeApiClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def __aenter__(self) -> "NoticeApiClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def request(self, method: str, url: str, data: Any = None, **kwargs) -> Dict[str, Any]:
        if data is not None:
            if method == "GET":
                kwargs["params"] = data
            else:
                kwargs["json"] = data
        # 网络错误直接抛出，由调用方处理
        response = await self._client.request(method, url, **kwargs)
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return dict(NOT_JSON)

    async def get(self, url: str, data: Any = None) -> Dict[str, Any]:
        return await self.request("GET", url, data)

    async def post(self, url: str, data: Any = None) -> Dict[str, Any]:
        return await self.request("POST", url, data)

    async def put(self, url: str, data: Any = None) -> Dict[str, Any]:
        return await self.request("PUT", url, data)

    async def delete(self, url: str, data: Any = None) -> Dict[str, Any]:
        return await self.request("DELETE", url, data)

    # ---- 公告接口 ----

    async def list_notices(self, page: int = 1, size: int = 10, status: Optional[str] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {"page": page, "size": size}
        if status:
            params["status"] = status
        return await self.get("/api/notices", params)

    async def get_notice(self, notice_id: int) -> Dict[str, Any]:
        return await self.get(f"/api/notices/{notice_id}")

    async def create_notice(self, title: str, content: str, content_delta: Any = None) -> Dict[str, Any]:
        return await self.post("/api/notices", {"title": title, "content": content, "content_delta": content_delta})

    async def update_notice(self, notice_id: int, title: str, content: str, content_delta: Any = None) -> Dict[str, Any]:
        return await self.put(
            f"/api/notices/{notice_id}",
            {"title": title, "content": content, "content_delta": content_delta},
        )

    async def publish_notice(self, notice_id: int) -> Dict[str, Any]:
        return await self.post(f"/api/notices/{notice_id}/publish")

    async def delete_notice(self, notice_id: int) -> Dict[str, Any]:
        return await self.delete(f"/api/notices/{notice_id}")

    async def batch_delete_notices(self, ids: Iterable[int]) -> Dict[str, Any]:
        return await self.post("/api/notices/batch_delete", {"ids": list(ids)})

    async def upload_image(self, filename: str, content: bytes, content_type: str = "application/octet-stream") -> Dict[str, Any]:
        return await self.request("POST", "/api/upload", files={"file": (filename, content, content_type)})
