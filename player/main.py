# player/main.py
from __future__ import annotations

import logging

from fastapi import FastAPI

from player.api.routes.player import router as player_router
from player.core.config import settings
from player.engine import init_player

# ─────────────────────────────────────────────────────────────────────────────
# Приложение
# ─────────────────────────────────────────────────────────────────────────────
app = FastAPI(title="Assessment Player")

app.include_router(player_router)


# ─────────────────────────────────────────────────────────────────────────────
# Старт
# ─────────────────────────────────────────────────────────────────────────────
@app.on_event("startup")
def _startup():
    # конфиг + вопрос + init-действия; ошибки запуска видны в /api/player/status
    ctx = init_player(settings)
    logging.getLogger("player.web").info("player api ready (ready=%s)", ctx.ready)
