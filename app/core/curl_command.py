"""cURL Command Parsing — turn a pasted `curl ...` line into proxy request fields.

Invariants:
    - Pure function, raises ToolValidationError on unparseable input
    - Method defaults to GET, becomes POST when a body is present and no -X was given
    - Unknown flags are ignored; flags known to take a value consume it
    - Repeated data flags accumulate into one body; --json also implies JSON headers
"""

import shlex
from dataclasses import dataclass, field

from app.core.errors import ToolValidationError

_METHOD_FLAGS = {"-X", "--request"}
_HEADER_FLAGS = {"-H", "--header"}
_BODY_FLAGS = {
    "-d", "--data", "--data-raw", "--data-binary", "--data-ascii",
    "--data-urlencode", "--json",
}
_VALUE_FLAGS = {
    "-A", "--user-agent", "-b", "--cookie", "-e", "--referer",
    "-u", "--user", "-o", "--output", "-m", "--max-time",
    "--connect-timeout", "-x", "--proxy",
}


@dataclass
class CurlRequest:
    url: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None


def parse_curl_command(command: str) -> CurlRequest:
    """Extract url, method, headers and body from a curl invocation."""
    try:
        tokens = shlex.split(command.replace("\\\n", " "))
    except ValueError as e:
        raise ToolValidationError(f"Failed to parse cURL command: {e}", "curl_command")
    if tokens and tokens[0] == "curl":
        tokens = tokens[1:]

    url = None
    method = None
    headers: dict[str, str] = {}
    body = None
    is_json = False
    it = iter(tokens)
    for token in it:
        if token in _METHOD_FLAGS:
            method = _next_value(it, token).upper()
        elif token in _HEADER_FLAGS:
            key, sep, value = _next_value(it, token).partition(":")
            if sep and key.strip():
                headers[key.strip()] = value.strip()
        elif token in _BODY_FLAGS:
            value = _next_value(it, token)
            if body is None:
                body = value
            else:
                # curl joins repeated -d pieces with "&", --json pieces directly
                body += value if token == "--json" else "&" + value
            if token == "--json":
                is_json = True
        elif token in _VALUE_FLAGS:
            _next_value(it, token)
        elif token == "--url":
            url = _next_value(it, token)
        elif token.startswith("-"):
            continue
        elif url is None:
            url = token

    if not url:
        raise ToolValidationError(
            "Failed to parse cURL command: no URL found", "curl_command",
        )
    if method is None:
        method = "POST" if body is not None else "GET"
    if is_json:
        _set_default_header(headers, "Content-Type", "application/json")
        _set_default_header(headers, "Accept", "application/json")
    return CurlRequest(url=url, method=method, headers=headers, body=body)


def _next_value(it, flag: str) -> str:
    value = next(it, None)
    if value is None:
        raise ToolValidationError(
            f"Failed to parse cURL command: {flag} expects a value", "curl_command",
        )
    return value


def _set_default_header(headers: dict[str, str], name: str, value: str) -> None:
    if not any(key.lower() == name.lower() for key in headers):
        headers[name] = value
