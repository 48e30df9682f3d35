"""
Parcel Placement Service
Main entry point for the building placement HTTP service.
"""

import logging
import os
import sys
from pathlib import Path

# Add server directory to path for imports
server_dir = Path(__file__).parent.parent.parent
sys.path.insert(0, str(server_dir))

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Union
import uvicorn

from internal.placement import config
from internal.placement import geometry
from internal.placement import loaders
from internal.placement import plan
from internal.placement import presets
from internal.placement.placement import ZoningFormatError
from internal.placement.rows import Placement

# Load configuration
cfg = config.load_config()
logging.basicConfig(
    level=cfg.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Parcel Placement Service",
    description="Service for placing buildings on zoned city parcels",
    version="0.1.0",
)

# CORS middleware (allow the scene client to call this service)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Endpoints run on the event loop, so engine calls never overlap
engine = loaders.build_engine(cfg)


class HealthResponse(BaseModel):
    """Health check response"""

    status: str
    service: str
    version: str
    buildings: int
    parcels: int


class PlacementRequest(BaseModel):
    """Zoning to build a parcel with"""

    function: Union[int, str] = Field(..., description="1 residential, 2 commercial, 3 public, 4 cultural")
    floor_type: Union[int, str] = Field(..., description="1 low-rise to 4 super high-rise")
    material: Union[int, str] = Field(..., description="1 glass, 2 concrete")


class PlacementModel(BaseModel):
    """A building to instantiate"""

    building_id: int
    position: List[float]
    rotation_yaw: float
    parcel_id: int
    area: str


class PlacementResponse(BaseModel):
    """Response from placing buildings on a parcel"""

    success: bool
    parcel_id: int
    placements: List[PlacementModel] = []
    message: Optional[str] = None


class ZoningModel(BaseModel):
    function: str
    floor_type: str
    material: str
    energy_consumption: int = 0


class ParcelResponse(BaseModel):
    """Parcel geometry and bookkeeping"""

    id: int
    length: float
    width: float
    position: List[float]
    orientation: Optional[int] = None
    world_yaw: float
    type_t: int
    type_s: int
    bounds: Optional[Dict[str, float]] = None
    zoning: Optional[ZoningModel] = None
    summary: str
    usage: Dict[int, int] = {}


class SummaryRequest(BaseModel):
    summary: str = Field(default="", description="Design rationale for the parcel")


class SummaryResponse(BaseModel):
    parcel_id: int
    summary: str


class PlanRequest(BaseModel):
    """Planner output to apply"""

    content: str = Field(..., description="JSON array of parcel plans, optionally wrapped in prose")


class PlanResponse(BaseModel):
    """Response from applying a plan"""

    success: bool
    parcels: Dict[int, List[PlacementModel]] = {}
    skipped: List[str] = []
    total_placements: int = 0


class PresetListResponse(BaseModel):
    presets: List[str] = []


def _to_model(placement: Placement) -> PlacementModel:
    return PlacementModel(**placement.to_dict())


def _plan_response(outcome: plan.PlanOutcome) -> PlanResponse:
    return PlanResponse(
        success=True,
        parcels={
            parcel_id: [_to_model(p) for p in placements]
            for parcel_id, placements in outcome.placements.items()
        },
        skipped=outcome.skipped,
        total_placements=outcome.total_placements,
    )


def _require_parcel(parcel_id: int):
    parcel = engine.store.get(parcel_id)
    if parcel is None:
        raise HTTPException(status_code=404, detail=f"Parcel {parcel_id} not found")
    return parcel


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint"""
    return HealthResponse(
        status="ok",
        service="parcel-placement-service",
        version="0.1.0",
        buildings=len(engine.catalog),
        parcels=len(engine.store),
    )


@app.get("/api/v1/parcels/{parcel_id}", response_model=ParcelResponse)
async def get_parcel(parcel_id: int):
    """Get a parcel's geometry, zoning, summary and usage counts"""
    parcel = _require_parcel(parcel_id)

    bounds = None
    if parcel.orientation is not None:
        min_x, min_z, max_x, max_z = geometry.area_polygon(
            parcel.orientation, parcel.position, parcel.length, parcel.width
        ).bounds
        bounds = {"min_x": min_x, "min_z": min_z, "max_x": max_x, "max_z": max_z}

    zoning = None
    if parcel.zoning is not None:
        zoning = ZoningModel(
            function=parcel.zoning.function,
            floor_type=parcel.zoning.floor_type,
            material=parcel.zoning.material,
            energy_consumption=parcel.zoning.energy_consumption,
        )

    return ParcelResponse(
        id=parcel.id,
        length=parcel.length,
        width=parcel.width,
        position=list(parcel.position),
        orientation=parcel.orientation.value if parcel.orientation is not None else None,
        world_yaw=parcel.world_yaw,
        type_t=parcel.type_t,
        type_s=parcel.type_s,
        bounds=bounds,
        zoning=zoning,
        summary=engine.get_summary(parcel.id),
        usage=engine.store.usage.for_parcel(parcel.id),
    )


@app.post("/api/v1/parcels/{parcel_id}/placements", response_model=PlacementResponse)
async def place_buildings(parcel_id: int, request: PlacementRequest):
    """
    Place buildings on a parcel.

    Usage counts accumulate until /api/v1/clear is called.
    """
    _require_parcel(parcel_id)
    try:
        placements = engine.place_on_parcel(
            parcel_id, request.function, request.floor_type, request.material
        )
    except ZoningFormatError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.exception("Placement failed for parcel %s", parcel_id)
        raise HTTPException(
            status_code=500, detail=f"Failed to place buildings: {str(e)}"
        )

    engine.set_zoning(parcel_id, str(request.function), str(request.floor_type), str(request.material))
    return PlacementResponse(
        success=True,
        parcel_id=parcel_id,
        placements=[_to_model(p) for p in placements],
        message=None if placements else "No buildings could be placed on this parcel",
    )


@app.get("/api/v1/parcels/{parcel_id}/summary", response_model=SummaryResponse)
async def get_summary(parcel_id: int):
    """Get the design summary for a parcel"""
    _require_parcel(parcel_id)
    return SummaryResponse(parcel_id=parcel_id, summary=engine.get_summary(parcel_id))


@app.put("/api/v1/parcels/{parcel_id}/summary", response_model=SummaryResponse)
async def put_summary(parcel_id: int, request: SummaryRequest):
    """Store the design summary for a parcel"""
    _require_parcel(parcel_id)
    engine.set_summary(parcel_id, request.summary)
    return SummaryResponse(parcel_id=parcel_id, summary=engine.get_summary(parcel_id))


@app.post("/api/v1/plans/apply", response_model=PlanResponse)
async def apply_plan(request: PlanRequest):
    """Clear the current layout and apply a planner's zoning for every parcel"""
    try:
        entries = plan.parse_plan(request.content)
    except plan.PlanFormatError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return _plan_response(plan.apply_plan(engine, entries))


@app.get("/api/v1/presets", response_model=PresetListResponse)
async def list_presets():
    """List the stored city layouts"""
    return PresetListResponse(presets=presets.list_presets(cfg.preset_dir))


@app.post("/api/v1/presets/{name}/apply", response_model=PlanResponse)
async def apply_preset(name: str):
    """Clear the current layout and apply a stored city layout"""
    try:
        outcome = presets.apply_preset(engine, cfg.preset_dir, name)
    except presets.PresetNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except plan.PlanFormatError as e:
        logger.error("Preset %s is not a valid plan: %s", name, e)
        raise HTTPException(
            status_code=500, detail=f"Preset {name} is not a valid plan: {str(e)}"
        )
    return _plan_response(outcome)


@app.post("/api/v1/clear")
async def clear_all():
    """Reset usage counts, summaries and used special/cultural buildings"""
    engine.clear_all()
    return {"success": True, "parcels": len(engine.store)}


if __name__ == "__main__":
    port = int(os.getenv("PLACEMENT_SERVICE_PORT", "8082"))
    host = os.getenv("PLACEMENT_SERVICE_HOST", "0.0.0.0")

    uvicorn.run(
        "main:app", host=host, port=port, reload=cfg.environment == "development"
    )
