"""
Yearly reading goal model.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Optional, Any


@dataclass
class ReadingGoal:
    """Target number of books for one calendar year"""
    year: int
    target: int
    created_at: str = ""

    def __post_init__(self):
        if self.target <= 0:
            raise ValueError(f"Reading goal target must be positive, got {self.target}")
        if not self.created_at:
            self.created_at = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {"target": self.target, "createdAt": self.created_at}

    @classmethod
    def from_dict(cls, year: int, data: Dict[str, Any]) -> "ReadingGoal":
        return cls(
            year=int(year),
            target=int(data["target"]),
            created_at=str(data.get("createdAt") or ""),
        )

    def progress(self, books_read: int, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Progress summary for the goal widget.

        "On track" compares the books read against the share of the target
        expected by ``today``, linearly over the year.
        """
        today = today or date.today()
        start = date(self.year, 1, 1)
        end = date(self.year, 12, 31)
        total_days = (end - start).days
        days_passed = (today - start).days
        expected = (days_passed / total_days) * self.target if total_days else 0

        if today.year != self.year:
            months_remaining = 12
        else:
            months_remaining = 12 - (today.month - 1)

        return {
            "year": self.year,
            "target": self.target,
            "books_read": books_read,
            "percent": min(books_read / self.target * 100, 100),
            "remaining": max(self.target - books_read, 0),
            "is_complete": books_read >= self.target,
            "is_on_track": books_read >= expected,
            "months_remaining": months_remaining,
            "bonus_books": max(books_read - self.target, 0),
        }
