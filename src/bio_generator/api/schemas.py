from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

DESCRIPTION_MIN_CHARS = 50
DESCRIPTION_MAX_CHARS = 500
TEMPERATURE_MIN = 0.0
TEMPERATURE_MAX = 2.0


class BioType(str, Enum):
    personal = "personal"
    brand = "brand"


class BioTone(str, Enum):
    professional = "professional"
    casual = "casual"
    humorous = "humorous"
    passionate = "passionate"
    thoughtful = "thoughtful"


class GenerationRequest(BaseModel):
    """Form values for one bio generation, keyed by the page's field names."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    description: str = Field(
        ...,
        alias="content",
        min_length=DESCRIPTION_MIN_CHARS,
        max_length=DESCRIPTION_MAX_CHARS,
        description="Old bio or a few sentences about the user.",
    )
    bio_type: BioType = Field(..., alias="type")
    tone: BioTone
    use_emojis: bool = Field(..., alias="emojis", strict=True)
    temperature: float = Field(..., ge=TEMPERATURE_MIN, le=TEMPERATURE_MAX, strict=True)
    model_id: str = Field(..., alias="model", min_length=1)

    @field_validator("model_id", mode="before")
    @classmethod
    def _strip_model_id(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value


class GenerateResponse(BaseModel):
    status: str
    output: str | None = None
    html: str
    error: dict | None = None


class ValidationErrorResponse(BaseModel):
    errors: dict[str, str]
