from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool
from dotenv import load_dotenv
from io import BytesIO
from typing import Optional

from .engine import KeyboxImporter
from .models import ImportResponse, RawSource, StatusResponse
from .obs.prom import prometheus_latest
from .reporter import summary_for

load_dotenv()

app = FastAPI(title="Keybox Import Service")

_importer: Optional[KeyboxImporter] = None


def get_importer() -> KeyboxImporter:
    global _importer
    if _importer is None:
        _importer = KeyboxImporter()
    return _importer


@app.get("/__health")
async def health():
    return {"status": "ok"}


@app.post("/keybox")
async def import_keybox(request: Request, name: Optional[str] = None, importer: KeyboxImporter = Depends(get_importer)):
    # Body is the selected file; Content-Type is the picker's declared MIME type
    body = await request.body()
    mime = request.headers.get("content-type")
    if mime:
        mime = mime.split(";", 1)[0].strip().lower()
    # Engine takes a lock and touches the store; keep it off the event loop
    verdict = await run_in_threadpool(
        importer.import_bundle, RawSource(stream=BytesIO(body), mime_type=mime, name=name)
    )
    resp = ImportResponse(accepted=verdict.accepted, reason=verdict.reason, message=verdict.message or "")
    return JSONResponse(resp.model_dump(mode="json"), status_code=200 if verdict.accepted else 422)


@app.get("/keybox")
def keybox_status(importer: KeyboxImporter = Depends(get_importer)):
    present = importer.has_stored_bundle()
    return StatusResponse(present=present, summary=summary_for(present))


@app.delete("/keybox")
def clear_keybox(importer: KeyboxImporter = Depends(get_importer)):
    message = importer.clear_bundle()
    present = importer.has_stored_bundle()
    return StatusResponse(present=present, summary=summary_for(present), message=message)


@app.get("/metrics")
def metrics():
    payload, content_type = prometheus_latest()
    return Response(payload, media_type=content_type)
