from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime


class DeckRecord(SQLModel, table=True):
    id: Optional[str] = Field(default=None, primary_key=True)
    order: int = Field(index=True)
    seed: str = ""
    card_count: int = 0
    cards_json: str = ""  # JSON list of lists of symbol ids
    labels_json: str = ""  # JSON list of labels, empty when unlabelled
    created_at: Optional[datetime] = None
