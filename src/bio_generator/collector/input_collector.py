import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from pydantic import ValidationError

from bio_generator.api.schemas import (
    DESCRIPTION_MAX_CHARS,
    DESCRIPTION_MIN_CHARS,
    TEMPERATURE_MAX,
    TEMPERATURE_MIN,
    GenerationRequest,
)
from bio_generator.collector.prompts import build_instruction
from bio_generator.state.bio_state import BioSnapshot, BioState

logger = logging.getLogger(__name__)

FORM_FIELD = "form"

_ERROR_MESSAGES: dict[tuple[str, str], str] = {
    ("content", "string_too_short"): f"Content must be at least {DESCRIPTION_MIN_CHARS} characters",
    ("content", "string_too_long"): f"Content must be at most {DESCRIPTION_MAX_CHARS} characters",
    ("temperature", "greater_than_equal"): f"Temperature must be at least {TEMPERATURE_MIN:g}",
    ("temperature", "less_than_equal"): f"Temperature must be at most {TEMPERATURE_MAX:g}",
}

_FIELD_MESSAGES: dict[str, str] = {
    "content": "Content must be text",
    "type": "Type is required",
    "tone": "Tone is required",
    "model": "Model is required",
    "temperature": "Temperature must be a number",
    "emojis": "Emojis must be true or false",
}


class GenerationClient(Protocol):
    async def generate(self, prompt_text: str, temperature: float, model_id: str) -> str: ...


@dataclass
class SubmitOutcome:
    accepted: bool
    snapshot: BioSnapshot
    busy: bool = False
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return self.snapshot.error is not None


class InputCollector:
    """Validates form values and drives one generation per accepted submission."""

    def __init__(self, state: BioState, client: GenerationClient) -> None:
        self.state = state
        self.client = client

    def validate(self, payload: Any) -> tuple[GenerationRequest | None, dict[str, str]]:
        try:
            return GenerationRequest.model_validate(payload), {}
        except ValidationError as exc:
            return None, self._field_errors(exc)

    async def submit(self, payload: Any) -> SubmitOutcome:
        request, errors = self.validate(payload)
        if request is None:
            logger.info("submit.rejected fields=%s", ",".join(sorted(errors)))
            return SubmitOutcome(accepted=False, snapshot=self.state.snapshot, errors=errors)
        if self.state.loading:
            logger.info("submit.ignored reason=in_flight")
            return SubmitOutcome(accepted=False, snapshot=self.state.snapshot, busy=True)

        self.state.update(loading=True, error=None)
        instruction = build_instruction(request)
        logger.info(
            "submit.accepted model=%s temperature=%.2f type=%s tone=%s emojis=%s",
            request.model_id,
            request.temperature,
            request.bio_type.value,
            request.tone.value,
            request.use_emojis,
        )
        try:
            text = await self.client.generate(instruction, request.temperature, request.model_id)
        except Exception as exc:
            logger.exception("submit.failed model=%s", request.model_id)
            snapshot = self.state.update(loading=False, error=self._error_payload(exc))
            return SubmitOutcome(accepted=True, snapshot=snapshot)
        except BaseException:
            # cancelled mid-flight; release the form before propagating
            self.state.update(loading=False)
            raise

        snapshot = self.state.update(loading=False, output=text, error=None)
        return SubmitOutcome(accepted=True, snapshot=snapshot)

    @staticmethod
    def _field_errors(exc: ValidationError) -> dict[str, str]:
        errors: dict[str, str] = {}
        for error in exc.errors():
            loc = error.get("loc") or ()
            name = str(loc[0]) if loc else FORM_FIELD
            if name in errors:
                continue
            error_type = str(error.get("type", ""))
            if error_type == "missing":
                errors[name] = f"{name.capitalize()} is required"
                continue
            message = _ERROR_MESSAGES.get((name, error_type)) or _FIELD_MESSAGES.get(name)
            errors[name] = message or str(error.get("msg", "Invalid value"))
        return errors

    @staticmethod
    def _error_payload(exc: Exception) -> dict[str, Any]:
        message = str(exc) or exc.__class__.__name__
        hint = "Check GROQ_API_KEY/GROQ_BASE_URL and network connectivity"
        if "Connection error" not in message and not isinstance(exc, (ConnectionError, TimeoutError)):
            hint = "See llm.error in the server log for details"
        return {
            "type": exc.__class__.__name__,
            "message": message,
            "hint": hint,
        }


def form_defaults(default_model: str) -> Mapping[str, Any]:
    return {
        "model": default_model,
        "temperature": 1.0,
        "content": "",
        "type": "personal",
        "tone": "professional",
        "emojis": False,
    }
