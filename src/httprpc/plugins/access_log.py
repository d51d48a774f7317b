# src/httprpc/plugins/access_log.py

import time
import uuid
from typing import Optional

from ..core.context import RequestContext
from ..core.logging import RPCLogger, get_logger
from ..core.logging.filters import clear_request_id, get_request_id, set_request_id
from ..core.middleware import Handler
from ..utils.sanitizer import mask_url


class AccessLog:
    """
    Middleware that logs every request with its outcome and duration.

    Успешный запрос пишется на INFO ("request success"), медленный на
    WARNING, ошибка на ERROR ("request error") и пробрасывается дальше
    без изменений. Пароли и токены в URL маскируются.

    Args:
        logger: RPCLogger, по умолчанию общий get_logger()
        slow_threshold_ms: Порог медленного запроса (None = не проверять)
        request_id_header: Заголовок, в который передать request id
            (например "X-Request-ID"), None = не передавать

    Example:
        >>> get(None, url).use(access_log).do()
        >>> get(None, url).use(AccessLog(slow_threshold_ms=500)).do()
    """

    def __init__(
        self,
        logger: Optional[RPCLogger] = None,
        slow_threshold_ms: Optional[float] = None,
        request_id_header: Optional[str] = None,
    ):
        self._logger = logger
        self.slow_threshold_ms = slow_threshold_ms
        self.request_id_header = request_id_header

    @property
    def logger(self) -> RPCLogger:
        return self._logger if self._logger is not None else get_logger()

    def __call__(self, next_handler: Handler) -> Handler:
        def handler(ctx: RequestContext) -> None:
            request = ctx.request
            method = request.method
            url = mask_url(request.url)

            request_id = request.headers.get(self.request_id_header) if self.request_id_header else None
            if not request_id:
                request_id = str(uuid.uuid4())
            if self.request_id_header:
                request.headers[self.request_id_header] = request_id

            outer_request_id = get_request_id()
            set_request_id(request_id)
            begin = time.perf_counter()
            try:
                next_handler(ctx)
            except Exception as exc:
                self.logger.error(
                    "request error",
                    method=method,
                    url=url,
                    error=str(exc),
                    error_type=type(exc).__name__,
                    duration_ms=round((time.perf_counter() - begin) * 1000, 2),
                )
                raise
            else:
                self._log_success(ctx, method, url, begin)
            finally:
                if outer_request_id is None:
                    clear_request_id()
                else:
                    set_request_id(outer_request_id)

        return handler

    def _log_success(self, ctx: RequestContext, method: str, url: str, begin: float) -> None:
        duration_ms = round((time.perf_counter() - begin) * 1000, 2)
        response = ctx.response
        fields = {
            "method": method,
            "url": url,
            "status_code": response.status_code if response is not None else None,
            "duration_ms": duration_ms,
        }
        if self.slow_threshold_ms is not None and duration_ms > self.slow_threshold_ms:
            self.logger.warning("slow request", threshold_ms=self.slow_threshold_ms, **fields)
        else:
            self.logger.info("request success", **fields)


access_log = AccessLog()
