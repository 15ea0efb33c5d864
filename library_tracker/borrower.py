from __future__ import annotations

from dataclasses import asdict, dataclass

from library_tracker.validators import TextValidator


@dataclass(frozen=True)
class Borrower:
    """A registered library patron, identified by ``id``."""

    name: str
    id: str

    def __post_init__(self) -> None:
        TextValidator.require(self.name, "Name")
        TextValidator.require(self.id, "ID")

    def __str__(self) -> str:
        return f"Name: {self.name}, ID: {self.id}"

    def to_dict(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_dict(data: dict) -> "Borrower":
        return Borrower(name=data.get("name"), id=data.get("id"))
