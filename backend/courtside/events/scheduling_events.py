"""Scheduling domain events handed to external subsystems."""
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass
class EmailRequested:
    """An outbound e-mail for the delivery subsystem; retries are its concern."""

    to: str
    subject: str
    text: str
    html: str
    dedupe_key: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
