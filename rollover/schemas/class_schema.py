from pydantic import field_validator

from rollover.schemas.common import ApiModel

class ClassOut(ApiModel):
    name: str = ""
    section: str = ""  # e.g. "A"; the API sometimes stores ["A"]

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v):
        return str(v or "").strip()

    @field_validator("section", mode="before")
    @classmethod
    def _section(cls, v):
        if isinstance(v, list):
            return ",".join(str(s).strip() for s in v if s)
        return str(v or "").strip()

    @property
    def label(self) -> str:
        if self.section:
            return f"{self.name}-{self.section}"
        return self.name or "-"
