import logging
import re
import uuid
from flask import g, has_request_context, request

# Inbound ids from proxies are echoed back, so keep them short and printable.
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


class RequestIdFilter(logging.Filter):
    """Stamp every log record with the current request id ("-" outside requests)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = getattr(g, "request_id", "-") if has_request_context() else "-"
        return True


LOG_FORMAT = "[%(asctime)s] %(levelname)s request_id=%(request_id)s in %(module)s: %(message)s"


def init_request_id(app):
    for handler in app.logger.handlers:
        handler.addFilter(RequestIdFilter())
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

    @app.before_request
    def _assign_request_id():
        rid = request.headers.get("X-Request-Id", "")
        g.request_id = rid if _SAFE_REQUEST_ID.match(rid) else str(uuid.uuid4())

    @app.after_request
    def _add_request_id_header(response):
        if hasattr(g, "request_id"):
            response.headers["X-Request-Id"] = g.request_id
        return response
