"""Data models for generated story text and learner engagement."""

from dataclasses import asdict, dataclass, fields


@dataclass(frozen=True)
class PhraseBlock:
    index: int
    language: str
    romanization: str = ""
    english: str = ""
    english_contextual: str = ""
    parent_sentence: int = 0

    @property
    def is_translated(self) -> bool:
        return bool(self.romanization and self.english)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "PhraseBlock":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class ClickData:
    clicks: int = 0
    was_clicked: bool = False  # pending until the next commit

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ClickData":
        return cls(
            clicks=int(data.get("clicks", 0)),
            was_clicked=bool(data.get("was_clicked", False)),
        )
