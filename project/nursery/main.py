# nursery/main.py

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
from dotenv import load_dotenv
from contextlib import asynccontextmanager

# --- загрузка переменных окружения до чтения настроек ---
load_dotenv()

from nursery.utils.log import Log
from nursery.utils.database import init_db
from nursery.middleware.db_middleware import DBSessionMiddleware

# --- sync логгер для раннего старта ---
boot_log = Log()

# ────────────── Lifespan ──────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    boot_log.log_info_sync(target="startup", message="lifespan: startup начат")

    await init_db()
    boot_log.log_info_sync(target="startup", message="База инициализирована")

    app.state.log = Log()
    await app.state.log.log_info(target="startup", message="Сервис заказов запущен")

    yield

    # shutdown
    await app.state.log.log_info(target="shutdown", message="Остановка приложения")
    await app.state.log.shutdown()
    boot_log.log_info_sync(target="shutdown", message="Log корректно завершён")

# ────────────── Создаём FastAPI приложение ──────────────
app = FastAPI(title="Nursery Orders API", lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# DB middleware для request.state.db
app.add_middleware(DBSessionMiddleware)

@app.get("/")
def read_root():
    return {"message": "Nursery orders service is running"}

# ────────────── Подключение роутов ──────────────
from nursery.routes import order, merchant

app.include_router(order.router, prefix="/order", tags=["order"])
app.include_router(merchant.router, prefix="/merchant", tags=["merchant"])

# ────────────── Запуск uvicorn ──────────────
if __name__ == "__main__":
    boot_log.log_info_sync(target="startup", message="Запуск uvicorn.run")
    uvicorn.run(
        "nursery.main:app",
        host="127.0.0.1",
        port=8000,
        log_level="info",
        reload=True
    )
