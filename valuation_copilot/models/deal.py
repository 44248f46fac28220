from dataclasses import dataclass
from typing import Dict, Any


@dataclass(frozen=True)
class DealSummary:
    """Index entry for a saved deal, listed without loading its payload."""
    id: str
    name: str
    date: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "date": self.date
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DealSummary':
        return cls(
            id=str(data["id"]),
            name=data["name"],
            date=data["date"]
        )


@dataclass
class DealRecord:
    """A named snapshot of the whole valuation session."""
    id: str
    name: str
    date: str
    data: Dict[str, Any]

    @property
    def summary(self) -> DealSummary:
        return DealSummary(id=self.id, name=self.name, date=self.date)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "date": self.date,
            "data": self.data
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DealRecord':
        return cls(
            id=str(data["id"]),
            name=data["name"],
            date=data["date"],
            data=data["data"]
        )
