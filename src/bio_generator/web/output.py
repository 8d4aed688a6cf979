import logging
from pathlib import Path

from fastapi.templating import Jinja2Templates

from bio_generator.state.bio_state import BioSnapshot, BioState

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
OUTPUT_TEMPLATE = "_output.html"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


class OutputDisplay:
    """Renders the output region and re-renders it on every state change."""

    def __init__(self, state: BioState, jinja: Jinja2Templates | None = None) -> None:
        self.state = state
        self.jinja = jinja or templates
        self.html = self.render()
        self._unsubscribe = state.subscribe(self._on_change)

    def render(self, snapshot: BioSnapshot | None = None) -> str:
        snapshot = snapshot or self.state.snapshot
        return self.jinja.get_template(OUTPUT_TEMPLATE).render(snapshot=snapshot)

    def close(self) -> None:
        self._unsubscribe()

    def _on_change(self, snapshot: BioSnapshot) -> None:
        self.html = self.render(snapshot)
        logger.debug("output.rendered status=%s chars=%d", snapshot.status, len(self.html))
