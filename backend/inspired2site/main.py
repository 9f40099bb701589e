from contextlib import asynccontextmanager
from datetime import datetime, timezone
import asyncio

from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field
import httpx

from inspired2site.assembler import analyze
from inspired2site.config import Capabilities, get_settings, resolve_capabilities
from inspired2site.database import AnalysisSink, NullSink, make_sink
from inspired2site.errors import PipelineError, ValidationError
from inspired2site.images import encode_upload, generate_image
from inspired2site.models import Analysis, Project
from inspired2site.synthesizer import build_bundle, build_preview, project_from_analysis, render_preview


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: resolve optional backends once
    capabilities = resolve_capabilities(get_settings())
    try:
        sink = make_sink(capabilities)
    except Exception as e:
        print(f"[startup] Persistence unavailable, continuing without it: {e}")
        sink = NullSink()
    app.state.capabilities = capabilities
    app.state.sink = sink
    print(
        f"[startup] persistence={capabilities.persistence.value} "
        f"image_backend={capabilities.image_backend.value}"
    )
    yield


app = FastAPI(title="Inspired2Site API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies get the same 400 error shape as ValidationError."""
    code = "invalid_project" if request.url.path == "/api/export" else "invalid_request"
    error = ValidationError(_describe_errors(exc.errors()), code=code)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def _describe_errors(errors) -> str:
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg', 'invalid')}" if loc else err.get("msg", "invalid"))
    return "; ".join(parts) or "Malformed request body"


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

async def get_http_client():
    async with httpx.AsyncClient() as client:
        yield client


def get_capabilities(request: Request) -> Capabilities:
    return getattr(request.app.state, "capabilities", None) or Capabilities()


def get_sink(request: Request) -> AnalysisSink:
    return getattr(request.app.state, "sink", None) or NullSink()


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class AnalyzeRequest(BaseModel):
    url: str | None = None


class PreviewRequest(BaseModel):
    analysis: Analysis


class GenerateImageRequest(BaseModel):
    prompt: str | None = None


class ExportRequest(BaseModel):
    project: Project = Field(default_factory=Project)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@app.get("/api/health")
async def health():
    return {"ok": True, "time": datetime.now(timezone.utc).isoformat()}


@app.post("/api/analyze")
async def analyze_endpoint(
    request: AnalyzeRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
    sink: AnalysisSink = Depends(get_sink),
):
    """Analyze a single page: robots gate, fetch, extract, detect signatures."""
    try:
        analysis = await analyze(request.url, client=client, sink=sink, settings=get_settings())
    except PipelineError:
        raise
    except Exception as e:
        print(f"[analyze] Unexpected error: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "analyze_failed", "detail": f"Failed to analyze URL: {e}"},
        )
    return {"analysis": analysis.to_json()}


@app.post("/api/preview")
async def preview_endpoint(request: PreviewRequest):
    """Render preview sections for an analysis plus the project they export as."""
    sections = build_preview(request.analysis)
    project = project_from_analysis(request.analysis)
    return {
        "sections": [s.model_dump() for s in sections],
        "html": render_preview(sections),
        "project": project.model_dump(by_alias=True),
    }


@app.post("/api/generate-image")
async def generate_image_endpoint(
    request: GenerateImageRequest,
    capabilities: Capabilities = Depends(get_capabilities),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    image = await generate_image(
        request.prompt, capabilities, client=client, settings=get_settings()
    )
    return image.model_dump()


@app.post("/api/export")
async def export_endpoint(request: ExportRequest):
    """Build the static-site zip for a project."""
    bundle = await asyncio.to_thread(build_bundle, request.project)
    return Response(
        content=bundle.content,
        media_type=bundle.media_type,
        headers={"Content-Disposition": f"attachment; filename={bundle.filename}"},
    )


@app.post("/api/upload-image")
async def upload_image_endpoint(file: UploadFile | None = File(None)):
    if file is None:
        raise ValidationError("file missing", code="missing_file")
    data = await file.read()
    return encode_upload(data, file.content_type).model_dump()
