from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .logging_config import configure_logging
from .routers import analytics, dashboard, installments, payments, payouts

settings = get_settings()
configure_logging()

app = FastAPI(title="Consignment Analytics API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(dashboard.router)
app.include_router(analytics.router)
app.include_router(analytics.health_router)
app.include_router(payments.router)
app.include_router(payouts.router)
app.include_router(installments.router)


@app.get("/")
def root():
    return {"status": "ok"}
