from sqlmodel import Session, select as sqlmodel_select
from sqlalchemy import desc
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence
import json
import uuid

from . import models
from .logging_utils import get_logger

logger = get_logger("dobble.crud")

engine = None


def save_deck(
    session: Session,
    order: int,
    seed: Any,
    cards: Sequence[Sequence[int]],
    labels: Optional[Sequence[str]] = None,
) -> models.DeckRecord:
    rec = models.DeckRecord(
        id=uuid.uuid4().hex,
        order=order,
        seed="" if seed is None else str(seed),
        card_count=len(cards),
        cards_json=json.dumps([list(c) for c in cards]),
        labels_json=json.dumps(list(labels)) if labels else "",
        created_at=datetime.now(timezone.utc),
    )
    session.add(rec)
    session.commit()
    session.refresh(rec)
    logger.info("deck_saved", extra={"deck_id": rec.id, "order": order, "cards": rec.card_count})
    return rec


def get_deck(session: Session, deck_id: str) -> Optional[models.DeckRecord]:
    return session.get(models.DeckRecord, deck_id)


def list_decks(session: Session, limit: int = 10) -> List[models.DeckRecord]:
    stmt = (
        sqlmodel_select(models.DeckRecord)
        .order_by(desc(models.DeckRecord.created_at))
        .limit(limit)
    )
    return list(session.exec(stmt).all())


def delete_deck(session: Session, deck_id: str) -> bool:
    rec = session.get(models.DeckRecord, deck_id)
    if rec is None:
        return False
    session.delete(rec)
    session.commit()
    logger.info("deck_deleted", extra={"deck_id": deck_id})
    return True


def deck_to_dict(rec: models.DeckRecord) -> Dict[str, Any]:
    return {
        "id": rec.id,
        "order": rec.order,
        "seed": rec.seed,
        "card_count": rec.card_count,
        "cards": json.loads(rec.cards_json) if rec.cards_json else [],
        "labels": json.loads(rec.labels_json) if rec.labels_json else [],
        "created_at": rec.created_at.isoformat() if rec.created_at else None,
    }
