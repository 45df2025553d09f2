# nursery/middleware/db_middleware.py

from starlette.types import ASGIApp, Receive, Scope, Send
from nursery.utils import database

class DBSessionMiddleware:
    """
    Сессия заказов на HTTP-запрос (request.state.db).
    Упавший запрос откатывает незавершённую транзакцию до close().
    """

    def __init__(self, app: ASGIApp, session_factory=None):
        self.app = app
        self.session_factory = session_factory

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        factory = self.session_factory or database.AsyncSessionLocal
        session = factory()
        scope.setdefault("state", {})["db"] = session
        try:
            await self.app(scope, receive, send)
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
