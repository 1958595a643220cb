from __future__ import annotations

import json
import logging
import re

import httpx
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from board_filter.policy import ContentPolicy

logger = logging.getLogger(__name__)

router = APIRouter(tags=["proxy"])

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]
ORIGIN_HEADER = "x-origin"

_REPEATED_SLASHES = re.compile(r"/{2,}")

# Never copied between the client and the upstream connection.
_HOP_BY_HOP = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
        "host",
        "content-length",
    }
)
# httpx hands back a decoded body, so the upstream encoding no longer applies.
_RESPONSE_SKIP = _HOP_BY_HOP | {"content-encoding"}


def get_policy(request: Request) -> ContentPolicy:
    return request.app.state.policy


def get_upstream(request: Request) -> httpx.AsyncClient:
    return request.app.state.upstream


def is_moderated(method: str, path: str) -> bool:
    # "//posts" and "/posts//7" match like their single-slash forms.
    path = _REPEATED_SLASHES.sub("/", path)
    return (method == "POST" and path.startswith("/posts")) or (method == "PUT" and path.startswith("/posts/"))


def upstream_url(target: str, request: Request) -> httpx.URL:
    """Join the target origin and the request path exactly as the client sent it."""
    raw_path = request.scope.get("raw_path") or request.scope["path"].encode("utf-8")
    raw_path = raw_path.split(b"?", 1)[0]
    query = request.scope.get("query_string", b"")
    url = target + raw_path.decode("latin-1")
    if query:
        url = f"{url}?{query.decode('latin-1')}"
    return httpx.URL(url)


def extract_content(body: bytes) -> str | None:
    """Return the ``content`` string of a JSON body, or None when there is none."""
    if not body:
        return None
    try:
        payload = json.loads(body)
    except ValueError:
        return None
    if isinstance(payload, dict) and isinstance(payload.get("content"), str):
        return payload["content"]
    return None


def policy_violation(message: str) -> JSONResponse:
    return JSONResponse(status_code=422, content={"error": "content_policy_violation", "message": message})


async def forward(request: Request, body: bytes, upstream: httpx.AsyncClient) -> Response:
    settings = request.app.state.settings
    target = upstream_url(settings.target, request)

    headers = [(name, value) for name, value in request.headers.items() if name.lower() not in _HOP_BY_HOP]
    headers.append((ORIGIN_HEADER, settings.origin_header_value))

    outgoing = upstream.build_request(request.method, target, headers=headers, content=body)
    try:
        upstream_response = await upstream.send(outgoing)
    except httpx.RequestError as exc:
        logger.error("Upstream request %s %s failed: %s", request.method, target, exc)
        return JSONResponse(status_code=502, content={"error": "upstream_unavailable"})

    response = Response(content=upstream_response.content, status_code=upstream_response.status_code)
    for name, value in upstream_response.headers.multi_items():
        if name.lower() not in _RESPONSE_SKIP:
            response.headers.append(name, value)
    return response


@router.api_route("/{path:path}", methods=PROXY_METHODS, include_in_schema=False)
async def proxy(
    request: Request,
    policy: ContentPolicy = Depends(get_policy),
    upstream: httpx.AsyncClient = Depends(get_upstream),
) -> Response:
    body = await request.body()
    path = request.scope["path"]

    if is_moderated(request.method, path):
        content = extract_content(body)
        if content is not None:
            decision = await policy.evaluate(content)
            if not decision.allowed:
                logger.info("Rejected %s %s: %s", request.method, path, decision.reason)
                return policy_violation(decision.reason or "Content policy violation")

    return await forward(request, body, upstream)
