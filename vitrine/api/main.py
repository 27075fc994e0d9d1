"""Analytics pixel endpoint counting product views per day and brand."""

from __future__ import annotations

import functools
import logging

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import Response
from sqlalchemy.engine import Engine

from vitrine.db.counters import counter_key, create_tables, increment
from vitrine.db.session import create_engine_from_env

logger = logging.getLogger(__name__)

app = FastAPI(title="Vitrine Analytics")

# 1x1 transparent GIF
PIXEL_GIF = bytes(
    [71, 73, 70, 56, 57, 97, 1, 0, 1, 0, 128, 0, 0, 0, 0, 0, 255, 255, 255, 33, 249, 4, 1, 0, 0, 1, 0,
     44, 0, 0, 0, 0, 1, 0, 1, 0, 0, 2, 2, 68, 1, 0, 59]
)


@functools.lru_cache(maxsize=1)
def get_engine() -> Engine:
    engine = create_engine_from_env()
    create_tables(engine)
    return engine


@app.get("/p")
async def pixel(
    d: str | None = None,
    slug: str | None = None,
    product_path: str | None = None,
    engine: Engine = Depends(get_engine),
) -> Response:
    if not d or not slug or not product_path:
        raise HTTPException(status_code=400, detail="Bad Request")
    key = counter_key(d, slug, product_path)
    hits = increment(engine, key)
    logger.debug("Counted %s (%s)", key, hits)
    return Response(content=PIXEL_GIF, media_type="image/gif", headers={"Cache-Control": "no-store"})
