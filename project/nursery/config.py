# nursery/config.py

from decimal import Decimal
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./nursery.db"   # async URL базы заказов

    LOG_DIR: str = "nursery/log"    # корень для дневных лог-файлов
    LOG_PRINT: str = "1"
    LOG_PRINT_DB: str = "0"

    # допуск при сравнении сумм (плавающая погрешность)
    TOTALS_TOLERANCE: Decimal = Decimal("0.01")

    # служебные коды «платформы» вместо реального продавца
    PLATFORM_MERCHANT_CODES: list[str] = ["admin", "parent"]
    PLATFORM_STORE_NAME: str = "Admin Store"
    PLATFORM_STORE_EMAIL: str = "admin@kadiyamnursery.com"
    PLATFORM_STORE_PHONE: str = "N/A"
    PLATFORM_STORE_ADDRESS: str = "Kadiyam Nursery Main Store"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

settings = Settings()
