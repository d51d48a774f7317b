# src/httprpc/plugins/status.py

from ..core.context import RequestContext
from ..core.exceptions import ClientError, ServerError
from ..core.middleware import Handler


def raise_for_status(next_handler: Handler) -> Handler:
    """
    Middleware, превращающий 4xx/5xx ответ в исключение.

    Без него ответ с любым статусом считается успешным выполнением.
    Тело ответа закрывается перед тем, как поднять ClientError/ServerError,
    само исключение мемоизируется контекстом как ошибка выполнения.

    Example:
        >>> get(None, url).use(raise_for_status).do()  # ClientError on 404
    """
    def handler(ctx: RequestContext) -> None:
        next_handler(ctx)

        response = ctx.response
        if response is None:
            return

        status = response.status_code
        if 400 <= status < 500:
            error_class = ClientError
        elif 500 <= status < 600:
            error_class = ServerError
        else:
            return

        response.close()
        raise error_class(status, response.url or ctx.request.url, response.reason or "")

    return handler
