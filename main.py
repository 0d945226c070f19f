"""
Raster Script Composer - FastAPI Application
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, Response
from pydantic import BaseModel, Field
from typing import Dict, Optional
from pathlib import Path
from loguru import logger
import sys
import time

from config import settings
from modules import ScriptInterpreter, RenderResult
from utils.exceptions import ComposerError
from utils.image_utils import image_format


# Configure logging
logger.remove()
logger.add(sys.stderr, level="INFO")
logger.add("logs/app.log", rotation="500 MB", retention="10 days", level="DEBUG")

# Create logs directory
Path("logs").mkdir(exist_ok=True)


# ============================================================================
# Request / Response Models
# ============================================================================

class RenderRequest(BaseModel):
    """Inline script rendering request"""
    script: str = Field(..., description="Script source, one command per line")
    variables: Dict[str, str] = Field(default_factory=dict, description="Initial {$name} variables")


class StatusResponse(BaseModel):
    """Generic status response"""
    status: str
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    """Script error as returned to clients"""
    error: str
    line: Optional[int] = None
    message: str


# ============================================================================
# Application
# ============================================================================

app = FastAPI(
    title=settings.API_TITLE,
    description="Compose JPEG/PNG documents from line-oriented drawing scripts",
    version=settings.API_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ComposerError)
async def composer_error_handler(request: Request, exc: ComposerError):
    """Script failures are client errors: report type, line and message"""
    logger.warning(f"⚠️ {request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=400, content=exc.to_dict())


def resolve_script_path(name: str) -> Path:
    """
    Map a script name from a request onto the scripts directory

    Raises:
        HTTPException: 400 if the path leaves the scripts directory, 404 if missing
    """
    scripts_dir = settings.SCRIPTS_DIR.resolve()
    script_path = (scripts_dir / name).resolve()

    if not script_path.is_relative_to(scripts_dir):
        raise HTTPException(status_code=400, detail=f"Invalid script path: {name}")
    if not script_path.is_file():
        raise HTTPException(status_code=404, detail=f"Script not found: {name}")

    return script_path


def render_response(result: RenderResult) -> Response:
    """Return the written output file, or the document as JPEG if nothing was written"""
    if result.output_path is not None:
        media_type = "image/png" if image_format(result.output_path) == "png" else "image/jpeg"
        return FileResponse(result.output_path, media_type=media_type, filename=result.output_path.name)

    return Response(
        content=result.document.encode("jpeg", settings.JPEG_QUALITY),
        media_type="image/jpeg",
    )


# API Endpoints
@app.get("/health", response_model=StatusResponse)
def health():
    """Health check endpoint"""
    return StatusResponse(
        status="healthy",
        message="All systems operational"
    )


@app.get("/render", responses={400: {"model": ErrorResponse}})
def render_file(file: str, request: Request):
    """
    Run a script from the scripts directory

    Every query parameter other than `file` becomes a script variable.

    Args:
        file: Script file name, relative to the scripts directory

    Returns:
        The rendered image
    """
    script_path = resolve_script_path(file)
    variables = {k: v for k, v in request.query_params.items() if k != "file"}

    logger.info(f"🎨 Render {file} with {len(variables)} variable(s)")
    start_time = time.time()

    result = ScriptInterpreter(
        variables=variables,
        allowed_dirs=settings.render_dirs,
    ).run_file(script_path)

    logger.success(f"⏱️ Rendered {file} in {time.time() - start_time:.2f}s")
    return render_response(result)


@app.post("/render", responses={400: {"model": ErrorResponse}})
def render_inline(request: RenderRequest):
    """
    Run an inline script

    Relative file names in the script resolve against the scripts directory.
    """
    logger.info(f"🎨 Render inline script with {len(request.variables)} variable(s)")
    start_time = time.time()

    result = ScriptInterpreter(
        variables=request.variables,
        base_dir=settings.SCRIPTS_DIR,
        allowed_dirs=settings.render_dirs,
    ).run(request.script)

    logger.success(f"⏱️ Rendered inline script in {time.time() - start_time:.2f}s")
    return render_response(result)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=True
    )
