# File: civicvoice/main.py
# Project: civicvoice-backend

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi import _rate_limit_exceeded_handler

from civicvoice.core.config import cors_origins_list, settings
from civicvoice.core.errors import register_exception_handlers
from civicvoice.core.ratelimit import limiter
from civicvoice.routers import alerts, departments, issues, issues_stats, uploads

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="CivicVoice API")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins_list(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/health")
def health():
    return {"ok": True}

app.include_router(issues_stats.router)
app.include_router(issues.router)
app.include_router(departments.router)
app.include_router(alerts.router)
app.include_router(uploads.router)
