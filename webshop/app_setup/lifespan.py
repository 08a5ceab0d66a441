"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Construit les services (checkout, webhook, commandes, catalogue) si absents de app.state
- Initialise FastAPILimiter (Redis) avec options de test (fakeredis)
- Variables d'environnement supportées:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: désactive complètement (tests)
  - USE_FAKE_REDIS_FOR_TESTS=1: utilise fakeredis (tests)
  - LOCAL_RATE_LIMIT_FALLBACK=1: active un fallback local si l'init échoue
"""
import os
import logging
from contextlib import asynccontextmanager
import redis.asyncio as aioredis
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

from .services import build_services

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("uvicorn.error")
    if not getattr(app.state, "checkout_service", None):
        build_services(app)

    limiter_started = False
    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
        app.state.rate_limit_enabled = False
        logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
    else:
        try:
            if os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1":
                from fakeredis.aioredis import FakeRedis  # tests only
                r = FakeRedis(decode_responses=True)
            else:
                redis_url = os.getenv("RATE_LIMIT_REDIS_URL", "redis://127.0.0.1:6379/0")
                r = aioredis.from_url(redis_url, encoding="utf-8", decode_responses=True)
            await FastAPILimiter.init(r)
            limiter_started = True
            app.state.rate_limit_enabled = True
            logger.info("Rate limiting enabled")
        except Exception as e:
            app.state.rate_limit_enabled = False
            if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
                logger.warning("Rate limiting falling back to local in-memory due to init error: %s", e)
            else:
                logger.warning("Rate limiting disabled due to init error: %s", e)

    yield

    if limiter_started:
        await FastAPILimiter.close()
