"""
Static file apps for uploaded media and the optional pre-built front end.
"""

from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.staticfiles import StaticFiles


class CachedStaticFiles(StaticFiles):
    """StaticFiles that adds a fixed Cache-Control header to every file response."""

    def __init__(self, *args, cache_control: str, **kwargs):
        super().__init__(*args, **kwargs)
        self.cache_control = cache_control

    def file_response(self, *args, **kwargs):
        response = super().file_response(*args, **kwargs)
        response.headers["Cache-Control"] = self.cache_control
        return response


class SPAStaticFiles(StaticFiles):
    """
    Serves a single-page app: unknown paths fall back to index.html so the
    client-side router can handle them. API paths never fall back.
    """

    def __init__(self, *args, api_prefix: str = "/api", **kwargs):
        kwargs.setdefault("html", True)
        super().__init__(*args, **kwargs)
        self.api_prefix = api_prefix.strip("/")

    async def get_response(self, path: str, scope):
        try:
            return await super().get_response(path, scope)
        except StarletteHTTPException as e:
            if e.status_code != 404 or path.split("/", 1)[0] == self.api_prefix:
                raise
            return await super().get_response("index.html", scope)
