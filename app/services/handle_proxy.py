"""Proxy Handler — execute_proxy_request from explicit fields or a curl command."""

import logging

from app.core.curl_command import parse_curl_command
from app.core.errors import ToolExecutionError, ToolValidationError
from app.core.project_context import ProjectContext

logger = logging.getLogger(__name__)


class ProxyHandlers:

    def __init__(self, ctx: ProjectContext):
        self.ctx = ctx

    async def execute_proxy_request(self, input_data: dict) -> dict:
        if self.ctx.proxy is None:
            raise ToolExecutionError(
                "execute_proxy_request",
                "Backend URL is not configured in this project settings.",
            )
        url = input_data.get("url")
        method = input_data.get("method")
        headers = input_data.get("headers")
        body = input_data.get("body")
        if input_data.get("curl_command"):
            parsed = parse_curl_command(input_data["curl_command"])
            url, method, headers, body = (
                parsed.url, parsed.method, parsed.headers, parsed.body,
            )
        if not url or not method:
            raise ToolValidationError(
                "Missing URL or Method. Provide explicitly or via valid cURL command.",
                "url",
            )
        if headers is not None and not isinstance(headers, dict):
            raise ToolValidationError("'headers' must be an object", "headers")

        logger.info(
            f"Proxy request {method} {url}",
            extra={"project_id": self.ctx.project_id, "tool_name": "execute_proxy_request"},
        )
        result = await self.ctx.proxy.execute(
            url, method,
            headers={str(k): str(v) for k, v in (headers or {}).items()},
            body=body,
        )
        return {"success": True, "data": result}
