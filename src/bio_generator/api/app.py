import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse

from bio_generator.api.schemas import (
    DESCRIPTION_MAX_CHARS,
    DESCRIPTION_MIN_CHARS,
    TEMPERATURE_MAX,
    TEMPERATURE_MIN,
    BioTone,
    BioType,
    GenerateResponse,
    ValidationErrorResponse,
)
from bio_generator.collector.input_collector import FORM_FIELD, form_defaults
from bio_generator.config import ModelOption
from bio_generator.service.bio import BioService, BioSession
from bio_generator.state.bio_state import BioSnapshot
from bio_generator.web.output import templates

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = FastAPI(title="bio-generator", version="0.1.0")
service = BioService()


def _session_or_404(session_id: str) -> BioSession:
    session = service.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Unknown session; reload the page")
    return session


def _state_response(session: BioSession, snapshot: BioSnapshot) -> GenerateResponse:
    return GenerateResponse(html=session.display.html, **snapshot.as_meta())


@app.get("/healthz")
async def healthz() -> dict:
    return {"status": "ok"}


@app.get("/models", response_model=list[ModelOption])
async def models() -> list[ModelOption]:
    return service.settings.model_catalog


@app.get("/", response_class=HTMLResponse)
async def index(request: Request) -> HTMLResponse:
    session_id, session = service.open_session()
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "session_id": session_id,
            "models": service.settings.model_catalog,
            "defaults": form_defaults(service.settings.default_model),
            "bio_types": [item.value for item in BioType],
            "tones": [item.value for item in BioTone],
            "limits": {
                "content_min": DESCRIPTION_MIN_CHARS,
                "content_max": DESCRIPTION_MAX_CHARS,
                "temperature_min": TEMPERATURE_MIN,
                "temperature_max": TEMPERATURE_MAX,
            },
            "output_html": session.display.html,
        },
    )


@app.get("/sessions/{session_id}/output", response_model=GenerateResponse)
async def output(session_id: str) -> GenerateResponse:
    session = _session_or_404(session_id)
    return _state_response(session, session.state.snapshot)


@app.post(
    "/sessions/{session_id}/generate",
    response_model=GenerateResponse,
    responses={
        409: {"model": GenerateResponse},
        422: {"model": ValidationErrorResponse},
        502: {"model": GenerateResponse},
    },
)
async def generate(session_id: str, request: Request):
    session = _session_or_404(session_id)
    try:
        payload = await request.json()
    except ValueError:
        errors = {FORM_FIELD: "Request body must be a JSON object"}
        return JSONResponse(status_code=422, content=ValidationErrorResponse(errors=errors).model_dump())

    outcome = await service.submit(session, payload)
    if outcome.errors:
        return JSONResponse(status_code=422, content=ValidationErrorResponse(errors=outcome.errors).model_dump())

    body = _state_response(session, outcome.snapshot)
    if outcome.busy:
        return JSONResponse(status_code=409, content=body.model_dump())
    if outcome.failed:
        return JSONResponse(status_code=502, content=body.model_dump())
    return body
