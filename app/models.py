# app/models.py
from dataclasses import dataclass, field
from typing import Optional

@dataclass
class Director:
    id: Optional[int]
    name: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}

@dataclass
class Title:
    id: Optional[int]
    title: Optional[str] = None
    show_id: Optional[str] = None
    type: Optional[str] = None
    director_id: Optional[int] = None  # reference only, never inlined on disk
    cast: Optional[str] = None
    country: Optional[str] = None
    date_added: Optional[str] = None
    release_year: Optional[int] = None
    rating: Optional[str] = None
    duration: Optional[str] = None
    listed_in: Optional[str] = None
    description: Optional[str] = None
    # populated by the repo when joining
    director: Optional[Director] = field(default=None, compare=False, repr=False)

    def to_dict(self) -> dict:
        """Serialize with the director inlined (or None when unresolved)."""
        return {
            "id": self.id,
            "show_id": self.show_id,
            "type": self.type,
            "title": self.title,
            "director": self.director.to_dict() if self.director else None,
            "cast": self.cast,
            "country": self.country,
            "date_added": self.date_added,
            "release_year": self.release_year,
            "rating": self.rating,
            "duration": self.duration,
            "listed_in": self.listed_in,
            "description": self.description,
        }

# columns persisted for a title, in table order
TITLE_FIELDS = ("show_id", "type", "title", "director_id", "cast", "country", "date_added",
                "release_year", "rating", "duration", "listed_in", "description")
