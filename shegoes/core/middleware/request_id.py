import time
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware

from shegoes.core.logging import latency_bucket_ms, log_event, request_id_ctx_var, user_id_ctx_var


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind request id and caller (X-User-Id) to the log context for one request."""

    def __init__(self, app, header_name: str = "x-request-id", user_header: str = "x-user-id"):
        super().__init__(app)
        self.header_name = header_name
        self.user_header = user_header

    async def dispatch(self, request, call_next):
        rid = request.headers.get(self.header_name) or str(uuid4())
        user_id = (request.headers.get(self.user_header) or "").strip() or None
        request.state.request_id = rid

        rid_token = request_id_ctx_var.set(rid)
        user_token = user_id_ctx_var.set(user_id)
        start = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            user_id_ctx_var.reset(user_token)
            request_id_ctx_var.reset(rid_token)

        response.headers[self.header_name] = rid
        log_event(
            "warning" if response.status_code >= 500 else "info",
            "request.complete",
            request_id=rid,
            user_id=user_id,
            extra={
                "path": request.url.path,
                "method": request.method,
                "status": response.status_code,
                "latency_bucket": latency_bucket_ms((time.perf_counter() - start) * 1000),
            },
        )
        return response
