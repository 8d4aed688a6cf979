import asyncio
import logging

import pytest

from bio_generator.api.schemas import BioTone, BioType
from bio_generator.collector.input_collector import InputCollector
from bio_generator.collector.prompts import build_instruction
from bio_generator.state.bio_state import BioState

DESCRIPTION = "I build developer tools, run long distances and write about open source every week."


def _payload(**overrides) -> dict:
    payload = {
        "model": "llama3-8b-8192",
        "temperature": 0.7,
        "content": DESCRIPTION,
        "type": "personal",
        "tone": "casual",
        "emojis": True,
    }
    payload.update(overrides)
    return payload


class _RecordingClient:
    def __init__(self, reply: str = "Builder of tools. Runner of miles.") -> None:
        self.reply = reply
        self.calls: list[tuple[str, float, str]] = []

    async def generate(self, prompt_text: str, temperature: float, model_id: str) -> str:
        self.calls.append((prompt_text, temperature, model_id))
        return self.reply


class _FailingClient:
    def __init__(self) -> None:
        self.calls = 0

    async def generate(self, prompt_text: str, temperature: float, model_id: str) -> str:
        self.calls += 1
        raise RuntimeError("Connection error.")


@pytest.mark.parametrize("length", [0, 1, 49, 501, 800])
def test_description_out_of_bounds_is_rejected(length: int) -> None:
    client = _RecordingClient()
    collector = InputCollector(BioState(), client)

    outcome = asyncio.run(collector.submit(_payload(content="x" * length)))

    assert outcome.accepted is False
    assert "content" in outcome.errors
    assert client.calls == []


def test_description_messages_name_the_bound() -> None:
    collector = InputCollector(BioState(), _RecordingClient())
    _, short = collector.validate(_payload(content="too short"))
    _, long = collector.validate(_payload(content="y" * 501))
    assert short["content"] == "Content must be at least 50 characters"
    assert long["content"] == "Content must be at most 500 characters"


@pytest.mark.parametrize("length", [50, 500])
def test_description_bounds_are_inclusive(length: int) -> None:
    collector = InputCollector(BioState(), _RecordingClient())
    request, errors = collector.validate(_payload(content="z" * length))
    assert errors == {}
    assert request is not None
    assert len(request.description) == length


@pytest.mark.parametrize(
    ("field", "value", "message"),
    [
        ("type", "corporate", "Type is required"),
        ("type", "", "Type is required"),
        ("tone", "angry", "Tone is required"),
        ("tone", None, "Tone is required"),
        ("model", "", "Model is required"),
        ("model", "   ", "Model is required"),
        ("temperature", -0.1, "Temperature must be at least 0"),
        ("temperature", 2.5, "Temperature must be at most 2"),
        ("temperature", "hot", "Temperature must be a number"),
    ],
)
def test_invalid_field_blocks_submission(field: str, value, message: str) -> None:
    client = _RecordingClient()
    collector = InputCollector(BioState(), client)

    outcome = asyncio.run(collector.submit(_payload(**{field: value})))

    assert outcome.errors == {field: message}
    assert client.calls == []


def test_missing_fields_are_reported_per_field() -> None:
    collector = InputCollector(BioState(), _RecordingClient())
    _, errors = collector.validate({"content": DESCRIPTION})
    assert errors == {
        "type": "Type is required",
        "tone": "Tone is required",
        "emojis": "Emojis is required",
        "temperature": "Temperature is required",
        "model": "Model is required",
    }


def test_non_object_payload_is_a_form_error() -> None:
    collector = InputCollector(BioState(), _RecordingClient())
    request, errors = collector.validate(["not", "a", "form"])
    assert request is None
    assert list(errors) == ["form"]


@pytest.mark.parametrize("temperature", [0, 0.0, 2, 2.0])
def test_temperature_bounds_are_inclusive(temperature) -> None:
    client = _RecordingClient()
    collector = InputCollector(BioState(), client)

    outcome = asyncio.run(collector.submit(_payload(temperature=temperature)))

    assert outcome.errors == {}
    assert outcome.accepted is True
    assert client.calls[0][1] == temperature


@pytest.mark.parametrize(
    ("field", "value", "message"),
    [
        ("emojis", "no", "Emojis must be true or false"),
        ("emojis", 1, "Emojis must be true or false"),
        ("temperature", "1.5", "Temperature must be a number"),
        ("temperature", True, "Temperature must be a number"),
    ],
)
def test_loosely_typed_values_are_rejected(field: str, value, message: str) -> None:
    collector = InputCollector(BioState(), _RecordingClient())
    request, errors = collector.validate(_payload(**{field: value}))
    assert request is None
    assert errors == {field: message}


def test_all_enum_values_are_accepted() -> None:
    collector = InputCollector(BioState(), _RecordingClient())
    for bio_type in BioType:
        for tone in BioTone:
            request, errors = collector.validate(_payload(type=bio_type.value, tone=tone.value))
            assert errors == {}
            assert request is not None


def test_valid_submission_issues_exactly_one_call() -> None:
    client = _RecordingClient()
    state = BioState()
    collector = InputCollector(state, client)

    outcome = asyncio.run(collector.submit(_payload(model="gemma2-9b-it", temperature=1.3)))

    assert outcome.accepted is True
    assert len(client.calls) == 1
    prompt_text, temperature, model_id = client.calls[0]
    assert temperature == 1.3
    assert model_id == "gemma2-9b-it"
    assert DESCRIPTION in prompt_text
    assert state.output == client.reply
    assert state.loading is False
    assert outcome.snapshot.status == "done"


def test_model_id_whitespace_is_stripped() -> None:
    client = _RecordingClient()
    collector = InputCollector(BioState(), client)
    asyncio.run(collector.submit(_payload(model="whisper-large-v3\t")))
    assert client.calls[0][2] == "whisper-large-v3"


def test_output_is_published_verbatim() -> None:
    reply = "  Coffee ☕ + code 💻 | sharing   what I learn  "
    state = BioState()
    collector = InputCollector(state, _RecordingClient(reply=reply))

    asyncio.run(collector.submit(_payload()))

    assert state.output == reply


def test_failure_keeps_previous_output_and_clears_busy(caplog) -> None:
    state = BioState()
    state.update(output="previous bio")
    client = _FailingClient()
    collector = InputCollector(state, client)
    seen: list[bool] = []
    state.subscribe(lambda snapshot: seen.append(snapshot.loading))

    with caplog.at_level(logging.ERROR):
        outcome = asyncio.run(collector.submit(_payload()))

    assert client.calls == 1
    assert outcome.accepted is True
    assert outcome.failed is True
    assert state.output == "previous bio"
    assert state.loading is False
    assert seen == [True, False]
    assert outcome.snapshot.error == {
        "type": "RuntimeError",
        "message": "Connection error.",
        "hint": "Check GROQ_API_KEY/GROQ_BASE_URL and network connectivity",
    }
    assert any("submit.failed" in record.getMessage() for record in caplog.records)


def test_next_success_clears_previous_error() -> None:
    state = BioState()
    asyncio.run(InputCollector(state, _FailingClient()).submit(_payload()))
    assert state.snapshot.status == "failed"

    asyncio.run(InputCollector(state, _RecordingClient(reply="fresh")).submit(_payload()))
    assert state.snapshot.status == "done"
    assert state.snapshot.error is None
    assert state.output == "fresh"


def test_second_submission_while_in_flight_is_a_noop() -> None:
    class _GatedClient:
        def __init__(self) -> None:
            self.gate = asyncio.Event()
            self.calls = 0

        async def generate(self, prompt_text: str, temperature: float, model_id: str) -> str:
            self.calls += 1
            await self.gate.wait()
            return "done"

    async def scenario():
        client = _GatedClient()
        state = BioState()
        collector = InputCollector(state, client)
        first = asyncio.create_task(collector.submit(_payload()))
        await asyncio.sleep(0)
        assert state.loading is True
        second = await collector.submit(_payload(tone="humorous"))
        client.gate.set()
        return await first, second, client.calls, state

    first, second, calls, state = asyncio.run(scenario())

    assert calls == 1
    assert second.accepted is False
    assert second.busy is True
    assert first.accepted is True
    assert state.output == "done"
    assert state.loading is False


def test_cancelled_request_releases_busy_flag() -> None:
    class _HangingClient:
        async def generate(self, prompt_text: str, temperature: float, model_id: str) -> str:
            await asyncio.Event().wait()
            return ""

    async def scenario() -> BioState:
        state = BioState()
        task = asyncio.create_task(InputCollector(state, _HangingClient()).submit(_payload()))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        return state

    state = asyncio.run(scenario())
    assert state.loading is False
    assert state.output is None


def test_build_instruction_lists_every_field() -> None:
    collector = InputCollector(BioState(), _RecordingClient())
    request, _ = collector.validate(_payload(type="brand", tone="thoughtful", emojis=False))
    assert request is not None

    instruction = build_instruction(request)

    assert instruction.splitlines() == [
        f"User Input: {DESCRIPTION},",
        "Bio Type: brand,",
        "Bio Tone: thoughtful,",
        "Add Emojis: false",
    ]
