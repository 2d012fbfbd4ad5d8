from __future__ import annotations

from fastapi.staticfiles import StaticFiles


class CachedStaticFiles(StaticFiles):
    """Static files with a long-lived ``Cache-Control`` on hits.

    Uploaded names are unique per upload, so a stored file never changes
    under the same URL.
    """

    def __init__(self, *args, cache_control: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.cache_control = cache_control or "public, max-age=31536000, immutable"

    async def get_response(self, path: str, scope):
        response = await super().get_response(path, scope)
        if self.cache_control and response.status_code == 200:
            response.headers.setdefault("Cache-Control", self.cache_control)
        if path.endswith(".svg"):
            # SVG may carry script; never let it run in our origin
            response.headers.setdefault("Content-Security-Policy", "sandbox")
        return response
