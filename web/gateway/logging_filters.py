"""Logging filters for enriching log records with request context.

``RequestIdFilter`` copies the current request id from the ContextVar set
by ``gateway.middleware.RequestIdMiddleware`` onto every record, so the
JSON formatter can always reference ``%(request_id)s``. It is attached to
the handlers in ``settings.LOGGING``.
"""

from logging import Filter, LogRecord

from .middleware import REQUEST_ID_CTX


class RequestIdFilter(Filter):
    """Attach a ``request_id`` attribute to log records.

    Records logged outside a request get ``"-"``. A ``request_id`` passed
    explicitly through ``extra`` is left untouched.
    """

    def filter(self, record: LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = REQUEST_ID_CTX.get()
        return True
