import logging

from lab_booking.core.config import settings
from lab_booking.core.request_context import request_id_ctx_var


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx_var.get()
        return True


def setup_logging() -> None:
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return

    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s request_id=%(request_id)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    root_logger.setLevel(logging.DEBUG if settings.app_env == "dev" else logging.INFO)
    root_logger.addHandler(handler)
    # SQL echo is noisy at DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
