"""Proxy Tool Schema — replay or craft live requests through the proxy backend."""

from app.core.tool_schema import ToolDefinition, ToolParameter

EXECUTE_PROXY_REQUEST = ToolDefinition(
    name="execute_proxy_request",
    description=(
        "Execute a request via the project's backend proxy to get fresh data or "
        "bypass CORS. Provide url and method explicitly, or a raw curl command."
    ),
    parameters=(
        ToolParameter("url", "string", "Target URL."),
        ToolParameter("method", "string", "HTTP method."),
        ToolParameter("headers", "object", "Request headers."),
        ToolParameter("body", "string", "Request body."),
        ToolParameter(
            "curl_command", "string",
            "Raw cURL command. If provided, overrides the other fields.",
        ),
    ),
)

TOOLS_PROXY = [EXECUTE_PROXY_REQUEST]
