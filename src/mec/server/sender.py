"""ASGI response sending: translates a Response into ASGI messages."""

from mec._internal.asgi import Send
from mec.http.response import Response


def _body_allowed(status: int) -> bool:
    # 1xx, 204 and 304 responses carry no message body
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(response: Response, send: Send, *, method: str = "GET") -> None:
    """Send *response* as one ``http.response.start`` and one body message.

    HEAD requests get the full headers (including Content-Length) and an
    empty body.
    """
    body = response.body_bytes if _body_allowed(response.status) else b""
    headers: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
        (b"content-length", str(len(body)).encode("latin-1")),
    ]
    headers.extend(
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in response.headers
        if name.lower() != "content-length"
    )

    await send({"type": "http.response.start", "status": response.status, "headers": headers})
    await send({"type": "http.response.body", "body": b"" if method == "HEAD" else body})
