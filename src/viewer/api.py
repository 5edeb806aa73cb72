"""
FastAPI server for the scrolling landscape.

Acts as the viewport host: accepts scroll deltas and cursor moves, and
serves the composed scene as an SVG document.
"""

import argparse
import logging
import math
from typing import Dict, List, Optional, Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
import uvicorn

from ..engine import SceneConfig, SceneManager
from ..procgen import PLANNER_PARAMETERS, SCENE_PARAMETERS

log = logging.getLogger(__name__)

# Largest cursor position or scroll step accepted
MAX_TRAVEL = 1e7

# Loading plans every span between the loaded edge and the viewport, so one
# request may reach at most this far past the loaded span
MAX_UNLOADED_DISTANCE = 100_000.0


# Pydantic models for API
class ScrollRequest(BaseModel):
    delta: float = Field(..., ge=-MAX_TRAVEL, le=MAX_TRAVEL, description="Horizontal scroll distance")


class CursorRequest(BaseModel):
    x: float = Field(..., ge=-MAX_TRAVEL, le=MAX_TRAVEL, description="New viewport cursor position")


class ReseedRequest(BaseModel):
    seed: int = Field(..., ge=0, description="Seed for the new session")


class SceneResponse(BaseModel):
    seed: Optional[int]
    cursor_x: float
    loaded_span: List[float]
    chunk_count: int
    chunks_by_kind: Dict[str, int]
    occupied_buckets: int
    tracked_buckets: int
    canvas_length: int
    view_box: str
    updated: Optional[bool] = None


class HealthResponse(BaseModel):
    status: str
    seed: Optional[int]
    chunk_count: int
    window: List[float]


def create_app(
    seed: int = 42,
    width: int = 3000,
    height: int = 800,
    chunk_width: int = 512,
    cors_origins: List[str] = None,
    max_unloaded_distance: float = MAX_UNLOADED_DISTANCE
) -> FastAPI:
    """Create FastAPI application with a freshly loaded scene."""

    app = FastAPI(
        title="Landscape Scroll API",
        description="Procedurally generated, infinitely scrolling landscape",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    # Configure CORS
    if cors_origins is None:
        cors_origins = ["*"]  # Allow all origins for development

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    config = SceneConfig.from_overrides(
        window_width=width, window_height=height, chunk_width=chunk_width
    )
    log.info("initializing scene (seed=%s, window=%sx%s)", seed, width, height)
    scene = SceneManager(seed=seed, config=config)
    scene.update()
    app.state.scene = scene

    def check_reach(cursor_x: float):
        """Reject cursor targets too far beyond the loaded span to plan in one request."""
        lo, hi = scene.loaded_span
        vp = scene.viewport
        distance = max(lo - cursor_x, cursor_x + vp.width - hi, 0.0)
        if distance > max_unloaded_distance:
            raise HTTPException(
                status_code=400,
                detail=f"Target is {distance:.0f} units past the loaded span (limit {max_unloaded_distance:.0f})"
            )

    # Handlers are async and never await mid-operation, so scene reads and
    # writes cannot interleave on the event loop.

    @app.get("/health", response_model=HealthResponse)
    async def health():
        """Health check endpoint."""
        vp = scene.viewport
        return HealthResponse(
            status="healthy",
            seed=scene.seed,
            chunk_count=len(scene.chunks),
            window=[vp.width, vp.height]
        )

    @app.get("/scene", response_model=SceneResponse)
    async def get_scene():
        """Current scene statistics."""
        return SceneResponse(**scene.stats())

    @app.post("/scroll", response_model=SceneResponse)
    async def scroll(request: ScrollRequest):
        """Scroll the viewport, regenerating when a margin is crossed."""

        if not math.isfinite(request.delta):
            raise HTTPException(status_code=400, detail="delta must be finite")

        check_reach(scene.viewport.cursor_x + request.delta)

        try:
            updated = scene.scroll(request.delta)
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Scroll failed: {str(e)}")

        return SceneResponse(**scene.stats(), updated=updated)

    @app.post("/cursor", response_model=SceneResponse)
    async def set_cursor(request: CursorRequest):
        """Move the viewport without regenerating (for animated motion)."""

        if not math.isfinite(request.x):
            raise HTTPException(status_code=400, detail="x must be finite")

        check_reach(request.x)

        scene.set_cursor(request.x)
        return SceneResponse(**scene.stats(), updated=False)

    @app.post("/update", response_model=SceneResponse)
    async def update():
        """Force load, evict and compose for the current viewport."""

        try:
            scene.update()
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Update failed: {str(e)}")

        return SceneResponse(**scene.stats(), updated=True)

    @app.post("/reseed", response_model=SceneResponse)
    async def reseed(request: ReseedRequest):
        """Start a new session from another seed."""

        try:
            scene.reseed(request.seed)
            scene.update()
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Reseed failed: {str(e)}")

        return SceneResponse(**scene.stats(), updated=True)

    @app.get("/svg")
    async def svg():
        """Full SVG document for the current viewport."""
        return Response(content=scene.svg(), media_type="image/svg+xml")

    @app.get("/fields")
    async def fields(x: float = Query(..., description="Horizontal position")):
        """Planner helper field values at x."""

        if not math.isfinite(x):
            raise HTTPException(status_code=400, detail="x must be finite")

        return {"x": x, **scene.planner.fields.sample(x)}

    @app.get("/parameters")
    async def parameters() -> Dict[str, Any]:
        """Tunable parameter ranges and the values in use."""
        return {
            "planner": {
                "ranges": PLANNER_PARAMETERS.get_param_ranges(),
                "defaults": PLANNER_PARAMETERS.defaults(),
            },
            "scene": {
                "ranges": SCENE_PARAMETERS.get_param_ranges(),
                "defaults": SCENE_PARAMETERS.defaults(),
            },
        }

    return app


def main():
    """CLI entry point for API server."""

    parser = argparse.ArgumentParser(description="Landscape Scroll API Server")
    parser.add_argument("--seed", type=int, default=42, help="Scene seed")
    parser.add_argument("--width", type=int, default=3000, help="Viewport width")
    parser.add_argument("--height", type=int, default=800, help="Viewport height")
    parser.add_argument("--chunk-width", type=int, default=512, help="Width of one planned span")
    parser.add_argument("--max-unloaded-distance", type=float, default=MAX_UNLOADED_DISTANCE,
                        help="How far past the loaded span one request may move the viewport")
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind server")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind server")
    parser.add_argument("--log-level", default="info", help="Logging level")

    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    print(f"Starting Landscape Scroll API server...")
    print(f"Seed: {args.seed}")
    print(f"Server: http://{args.host}:{args.port}")
    print(f"Docs: http://{args.host}:{args.port}/docs")

    app = create_app(
        seed=args.seed,
        width=args.width,
        height=args.height,
        chunk_width=args.chunk_width,
        max_unloaded_distance=args.max_unloaded_distance
    )

    # Single worker: the scene lives in this process
    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower()
    )


if __name__ == "__main__":
    main()
