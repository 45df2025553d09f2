# nursery/utils/database.py

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from nursery.config import settings

# ────────────── Base для моделей ──────────────
Base = declarative_base()  # базовый класс для orders / order_items / merchants

# ────────────── Асинхронный движок ──────────────
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.LOG_PRINT_DB == "1"  # SQL в консоль для отладки
)

# ────────────── Асинхронная сессия ──────────────
AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False  # объекты остаются читаемыми после commit
)

# ────────────── Инициализация базы данных ──────────────
async def init_db():
    """
    Создаёт таблицы orders, order_items и merchants (если ещё не созданы).
    """
    # модели должны быть импортированы до create_all
    from nursery.models import order, merchant  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db():
    """Удаляет все таблицы (используется тестами)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
