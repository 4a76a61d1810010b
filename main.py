"""
FastAPI application entry point for the Vital Alerts Service.

This module configures and creates the FastAPI application with:
- Structured JSON Logging with request ID propagation
- Dependency Injection: Services and repositories injected via Depends()
- Exception Handling: Consistent error responses via setup_exception_handlers()
- CORS Middleware
- Lifespan Management: Database initialization
- Metrics Collection: HTTP and alert dispatch counters for Prometheus

Architecture Overview:
    ┌─────────────────────────────────────────────────────────────┐
    │                     FastAPI Application                      │
    ├─────────────────────────────────────────────────────────────┤
    │  Middleware Stack                                           │
    │    ├── LoggingMiddleware  - Request logging & metrics       │
    │    └── CORSMiddleware     - Cross-origin support            │
    ├─────────────────────────────────────────────────────────────┤
    │  Routers (api/routers/)                                     │
    │    ├── health.py     - /health, /ready, /metrics            │
    │    ├── users.py      - User accounts                        │
    │    ├── readings.py   - Log readings, retention sweep        │
    │    ├── settings.py   - Thresholds and emergency contacts    │
    │    └── alerts.py     - Alert history and notifications      │
    ├─────────────────────────────────────────────────────────────┤
    │  Services (services/)     ← Injected via Depends()          │
    │    ├── VitalsService      - Log → evaluate → dispatch       │
    │    ├── AlertDispatcher    - Email relay + local notification│
    │    ├── SettingsService    - Per-user alert settings         │
    │    ├── UserService                                          │
    │    └── AlertHistoryService                                  │
    ├─────────────────────────────────────────────────────────────┤
    │  Repositories (repositories/)   ← Injected into Services    │
    ├─────────────────────────────────────────────────────────────┤
    │  Database (SQLite)              ← Injected into Repositories│
    └─────────────────────────────────────────────────────────────┘
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from core.config import API_HOST, API_PORT, API_RELOAD, APP_NAME, EMAIL_RELAY_URL
from core.dependencies import get_database, get_no_contacts_signal
from core.exceptions import setup_exception_handlers
from core.logging_config import setup_logging
from core.middleware import LoggingMiddleware
from api.routers import (
    health_router,
    users_router,
    readings_router,
    settings_router,
    alerts_router,
)


def _log_missing_contacts(user_id: int) -> None:
    logging.getLogger(__name__).warning(
        "User has no emergency contacts; out-of-range alert was not emailed",
        extra={"user_id": user_id}
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        - Configures structured JSON logging
        - Initializes the database (triggers schema creation)
        - Connects the no-contacts listener

    Shutdown:
        - Disconnects the listener
    """
    setup_logging(level="INFO", json_format=True)

    logger = logging.getLogger(__name__)
    logger.info(f"Starting {APP_NAME} Vital Alerts API...")

    db = get_database()
    logger.info(
        "Database initialized",
        extra={"db_path": db.db_path, "email_relay_url": EMAIL_RELAY_URL}
    )

    signal = get_no_contacts_signal()
    signal.connect(_log_missing_contacts)

    yield

    signal.disconnect(_log_missing_contacts)
    logger.info("Vital Alerts API shutting down...")


app = FastAPI(
    title="Vital Alerts API",
    description="Log blood pressure and blood sugar readings, evaluate them against per-user "
                "thresholds and alert emergency contacts when a reading is out of range.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

setup_exception_handlers(app)

# Middleware runs in reverse order of registration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware)

app.include_router(health_router)
app.include_router(users_router)
app.include_router(readings_router)
app.include_router(settings_router)
app.include_router(alerts_router)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_RELOAD
    )
