"""Request-scoped cookie store.

Deleting a cookie records its name on ``request.state``; the cookie expiry
middleware expires it on whatever response is finally sent, including error
responses rendered by the exception handlers. The generic 500 handler runs
outside that middleware and expires the cookies itself.
"""

from fastapi import Request, Response

EXPIRED_COOKIES_STATE_KEY = "expired_cookies"


def get_expired_cookies(request: Request) -> list[str]:
    expired = getattr(request.state, EXPIRED_COOKIES_STATE_KEY, None)
    if expired is None:
        expired = []
        setattr(request.state, EXPIRED_COOKIES_STATE_KEY, expired)
    return expired


class RequestCookieStore:
    """Cookie store over the incoming request's cookies."""

    def __init__(self, request: Request):
        self._request = request

    def get(self, name: str) -> str | None:
        if name in get_expired_cookies(self._request):
            return None
        return self._request.cookies.get(name)

    def delete(self, name: str) -> None:
        expired = get_expired_cookies(self._request)
        if name not in expired:
            expired.append(name)


def expire_deleted_cookies(request: Request, response: Response) -> Response:
    """Expire every cookie deleted during the request on ``response``."""
    for name in get_expired_cookies(request):
        response.delete_cookie(name, path="/")
    return response
