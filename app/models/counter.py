from pydantic import BaseModel


class Counter(BaseModel):
    """Per-account sequence counter, stored at counters/{sequence_name}."""
    current_count: int = 0
