from fastapi import FastAPI, Depends, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlmodel import SQLModel, Session, create_engine
from pydantic import BaseModel, Field, validator
from typing import List, Optional, Union
from starlette.middleware.base import BaseHTTPMiddleware

from . import crud, design, game, models  # noqa: F401  models registers tables
from .cache import (
    cache_daily_deck,
    cache_design,
    get_cache,
    get_cached_daily_deck,
    get_cached_design,
)
from .deps import get_session
from .logging_utils import setup_logging, get_logger, request_id_ctx
from .rng import sample_cards
from .symbols import InsufficientSymbols, assign_labels, label_cards, parse_custom_symbols

import logging
import os
import re
import time
import uuid


MAX_ORDER = int(os.getenv("DOBBLE_MAX_ORDER", "31"))
_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')

setup_logging(logging.INFO)
logger = get_logger("dobble")
app = FastAPI(title="Dobble Deck")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        token = request_id_ctx.set(rid)
        start = time.time()
        client = request.client.host if request.client else "-"
        ua = request.headers.get("user-agent", "-")
        response = None
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = rid
            return response
        except Exception:
            logger.exception(
                "request_error",
                extra={"path": str(request.url), "method": request.method},
            )
            raise
        finally:
            duration_ms = int((time.time() - start) * 1000)
            status = getattr(response, "status_code", 500)
            logger.info(
                "request",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status": status,
                    "duration_ms": duration_ms,
                    "client": client,
                    "user_agent": ua,
                },
            )
            request_id_ctx.reset(token)


app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("validation_error", extra={"method": request.method, "url": str(request.url), "errors": exc.errors()})
    return JSONResponse(
        status_code=422,
        content={
            "detail": [{"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")} for e in exc.errors()],
            "body": exc.body,
            "message": "Input validation failed"
        }
    )


@app.exception_handler(design.InvalidOrder)
async def invalid_order_handler(request: Request, exc: design.InvalidOrder):
    logger.warning("invalid_order", extra={"order": exc.order, "path": request.url.path})
    return JSONResponse(status_code=400, content={"detail": str(exc), "order": exc.order})


@app.exception_handler(InsufficientSymbols)
async def insufficient_symbols_handler(request: Request, exc: InsufficientSymbols):
    logger.warning("insufficient_symbols", extra={"path": request.url.path, "error": str(exc)})
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "required": exc.required, "available": exc.available},
    )


def _check_order(order: int) -> int:
    # oversized orders must never reach is_prime
    if isinstance(order, int) and not isinstance(order, bool) and order > MAX_ORDER:
        raise design.InvalidOrder(order, f"order must not exceed {MAX_ORDER}")
    return design.validate_order(order)


def _design_payload(order: int) -> dict:
    _check_order(order)
    payload = get_cached_design(order)
    if payload is None:
        payload = design.generate_design(order).to_dict()
        cache_design(order, payload)
    return payload


def _validate_date_param(date: str) -> str:
    if date and not _DATE_RE.match(date):
        raise HTTPException(status_code=400, detail="Invalid date format. Use YYYY-MM-DD")
    return date or game.today_str()


def _daily_payload(date: str, order: int) -> dict:
    _check_order(order)
    actual_date = _validate_date_param(date)
    deck = get_cached_daily_deck(actual_date, order)
    if deck is None:
        deck = game.daily_deck(actual_date, order)
        cache_daily_deck(actual_date, order, deck)
    return deck


@app.get("/health", include_in_schema=False)
def health():
    return JSONResponse({"status": "ok"})


@app.get("/api/cache/stats", include_in_schema=False)
def cache_stats():
    """Get cache statistics for monitoring"""
    return JSONResponse({
        "cache_stats": get_cache().get_stats(),
        "status": "ok"
    })


@app.on_event("startup")
def on_startup():
    from .cache import warm_cache_for_today_and_recent, warm_design_cache

    db_path = os.getenv("DATABASE_URL", "sqlite:///./dobble.db")
    connect_args = {"check_same_thread": False} if db_path.startswith("sqlite") else {}
    if not db_path.startswith("sqlite"):
        engine = create_engine(
            db_path,
            echo=False,
            connect_args=connect_args,
            pool_pre_ping=True,
            pool_size=10,
            max_overflow=20,
            pool_recycle=1800,
        )
    else:
        engine = create_engine(db_path, echo=False, connect_args=connect_args)
    SQLModel.metadata.create_all(engine)
    crud.engine = engine

    try:
        warm_design_cache([2, 3, 5, 7])
        warm_cache_for_today_and_recent(game.DEFAULT_ORDER)
        logger.info("cache_warm_success", extra={"order": game.DEFAULT_ORDER})
    except design.InvalidOrder as e:
        logger.warning("cache_warm_failed", extra={"error": str(e)})


@app.get("/api/design")
def get_design(order: int):
    return _design_payload(order)


@app.get("/api/design/by_symbols")
def get_design_by_symbols(symbols_per_card: int):
    if symbols_per_card - 1 > MAX_ORDER:
        raise design.InvalidOrder(symbols_per_card - 1, f"order must not exceed {MAX_ORDER}")
    return _design_payload(design.order_for_symbols_per_card(symbols_per_card))


class DealRequest(BaseModel):
    order: int
    seed: Optional[Union[int, str]] = None
    count: Optional[int] = Field(None, ge=1)
    labels: Optional[List[str]] = None
    symbols_text: Optional[str] = Field(None, max_length=20000)
    pad: bool = True
    save: bool = False

    @validator('seed')
    def validate_seed(cls, v):
        if isinstance(v, str):
            v = v.strip()
            if len(v) > 200:
                raise ValueError('Seed too long (max 200 characters)')
            if v == "":
                return None
        return v

    @validator('labels')
    def validate_labels(cls, v):
        if v is None:
            return v
        cleaned = [s.strip() for s in v]
        if any(not s for s in cleaned):
            raise ValueError('Labels cannot be empty')
        if len(set(cleaned)) != len(cleaned):
            raise ValueError('Labels must be unique')
        return cleaned


@app.post("/api/deal")
def create_deal(body: DealRequest, session: Session = Depends(get_session)):
    payload = _design_payload(body.order)
    # a missing seed gets a fresh one so the deal can still be replayed
    seed = body.seed if body.seed is not None else uuid.uuid4().hex[:12]
    cards = sample_cards(payload["cards"], seed, body.count)
    result = {
        "order": payload["order"],
        "seed": seed,
        "symbol_count": payload["symbol_count"],
        "symbols_per_card": payload["symbols_per_card"],
        "cards": cards,
    }

    labels = None
    if body.labels is not None or body.symbols_text:
        given = body.labels if body.labels is not None else parse_custom_symbols(body.symbols_text)
        labels = assign_labels(payload["symbol_count"], given, pad=body.pad)
        result["labels"] = labels
        result["labelled_cards"] = label_cards(cards, labels)

    if body.save:
        rec = crud.save_deck(session, payload["order"], seed, cards, labels)
        result["id"] = rec.id
    logger.info("deal_created", extra={"order": payload["order"], "seed": seed, "cards": len(cards)})
    return result


@app.get("/api/decks")
def list_decks(limit: int = 10, session: Session = Depends(get_session)):
    if limit < 1 or limit > 100:
        raise HTTPException(status_code=400, detail="Limit must be between 1 and 100")
    return {"decks": [crud.deck_to_dict(rec) for rec in crud.list_decks(session, limit)]}


@app.get("/api/decks/{deck_id}")
def get_deck(deck_id: str, session: Session = Depends(get_session)):
    rec = crud.get_deck(session, deck_id)
    if rec is None:
        raise HTTPException(status_code=404, detail="deck not found")
    return crud.deck_to_dict(rec)


@app.delete("/api/decks/{deck_id}", status_code=204)
def delete_deck(deck_id: str, session: Session = Depends(get_session)):
    if not crud.delete_deck(session, deck_id):
        raise HTTPException(status_code=404, detail="deck not found")
    return Response(status_code=204)


@app.get("/api/daily")
def get_daily(date: str = "", order: int = game.DEFAULT_ORDER):
    return _daily_payload(date, order)


@app.get("/api/daily/pair")
def get_daily_pair(date: str = "", order: int = game.DEFAULT_ORDER):
    return game.round_for_deck(_daily_payload(date, order))


class MatchRequest(BaseModel):
    date: Optional[str] = None
    order: int = game.DEFAULT_ORDER
    indices: List[int] = Field(..., min_length=2, max_length=2)
    symbol: int = Field(..., ge=0)

    @validator('date')
    def validate_date(cls, v):
        if v is not None and v != "":
            if not _DATE_RE.match(v):
                raise ValueError('Date must be in YYYY-MM-DD format')
        return v


@app.post("/api/match")
def check_match(body: MatchRequest):
    deck = _daily_payload(body.date or "", body.order)
    try:
        card_a, card_b = game.match_cards(deck["cards"], body.indices)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    ok = game.check_match(card_a, card_b, body.symbol)
    logger.info("match_checked", extra={"date": deck["date"], "order": deck["order"], "cards": list(body.indices)})
    return {"match": ok}
