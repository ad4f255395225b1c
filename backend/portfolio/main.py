import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from portfolio.core.settings import settings
from portfolio.api.routes_quotes import router as quotes_router
from portfolio.services.quotes import get_price_source

logger.remove()
logger.add(sys.stderr, level=settings.log_level)

@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    # only close the shared quote client if a request ever created it
    if get_price_source.cache_info().currsize:
        await get_price_source().aclose()
        get_price_source.cache_clear()

app = FastAPI(title="Portfolio Quotes API", version="0.1.0", lifespan=lifespan)

# CORS for local dev frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(quotes_router, prefix="/api/quotes", tags=["quotes"])

@app.get("/healthz")
def healthz():
    return {"ok": True}

@app.get("/health")
def health():
    logger.info("Health check ok")
    return {"status": "ok", "env": settings.env}

def run():
    import uvicorn
    uvicorn.run("portfolio.main:app", host="0.0.0.0", port=settings.port)

if __name__ == "__main__":
    run()
