import logging
from dataclasses import dataclass
from typing import Any

from bio_generator.collector.input_collector import GenerationClient, InputCollector, SubmitOutcome
from bio_generator.config import Settings, get_settings
from bio_generator.providers.llm.groq import GroqChatClient
from bio_generator.state.bio_state import BioState
from bio_generator.state.sessions import SessionRegistry
from bio_generator.web.output import OutputDisplay

logger = logging.getLogger(__name__)


@dataclass
class BioSession:
    state: BioState
    collector: InputCollector
    display: OutputDisplay


class BioService:
    """Owns page sessions; all sessions share one generation client."""

    def __init__(self, settings: Settings | None = None, client: GenerationClient | None = None) -> None:
        self.settings = settings or get_settings()
        self.client = client or GroqChatClient(self.settings)
        self.sessions: SessionRegistry[BioSession] = SessionRegistry(
            self._new_session,
            max_sessions=self.settings.max_sessions,
        )

    def open_session(self) -> tuple[str, BioSession]:
        return self.sessions.create()

    def get_session(self, session_id: str) -> BioSession | None:
        return self.sessions.get(session_id)

    async def submit(self, session: BioSession, payload: Any) -> SubmitOutcome:
        outcome = await session.collector.submit(payload)
        logger.info(
            "generate.meta accepted=%s busy=%s status=%s errors=%d",
            outcome.accepted,
            outcome.busy,
            outcome.snapshot.status,
            len(outcome.errors),
        )
        return outcome

    def _new_session(self) -> BioSession:
        state = BioState()
        return BioSession(
            state=state,
            collector=InputCollector(state, self.client),
            display=OutputDisplay(state),
        )
