"""
Templates API Endpoints

Save a day's business hours and weights under a name and apply them to
other days.
"""

from datetime import date
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from goaltracker.database.connection import get_db_dependency
from goaltracker.database.models import SessionTemplate
from goaltracker.engine import GoalAllocationEngine
from goaltracker.serving.api.schemas import SessionResponse, WeightItem
from goaltracker.serving.cache import portal_cache
from goaltracker.services import TemplateService
from goaltracker.services.templates import template_weights

router = APIRouter()


class TemplateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    source_date: date


class TemplateResponse(BaseModel):
    id: UUID
    name: str
    start_hour: int
    end_hour: int
    weights: List[WeightItem]

    @classmethod
    def from_template(cls, template: SessionTemplate) -> "TemplateResponse":
        return cls(
            id=template.id,
            name=template.name,
            start_hour=template.start_hour,
            end_hour=template.end_hour,
            weights=[
                WeightItem(hour_start=hour, percentage=percentage)
                for hour, percentage in sorted(template_weights(template).items())
            ],
        )


@router.get("", response_model=List[TemplateResponse])
async def list_templates(db: AsyncSession = Depends(get_db_dependency)) -> List[TemplateResponse]:
    templates = await TemplateService(db).list_templates()
    return [TemplateResponse.from_template(template) for template in templates]


@router.post("", response_model=TemplateResponse, status_code=201)
async def create_template(
    payload: TemplateCreate,
    db: AsyncSession = Depends(get_db_dependency),
) -> TemplateResponse:
    """Capture the source day's effective hours and in-window weights."""
    template = await TemplateService(db).create_from_session(payload.name, payload.source_date)
    return TemplateResponse.from_template(template)


@router.post("/{template_id}/apply/{session_date}", response_model=SessionResponse)
async def apply_template(
    template_id: UUID,
    session_date: date,
    db: AsyncSession = Depends(get_db_dependency),
) -> SessionResponse:
    """Overwrite the day's hours and replace all of its weights with the template's."""
    service = TemplateService(db)
    await service.apply_template(template_id, session_date)
    await portal_cache.invalidate_all()
    engine = GoalAllocationEngine(await service.sessions.load_snapshot(session_date))
    return SessionResponse.from_engine(engine)


@router.delete("/{template_id}", status_code=204)
async def delete_template(
    template_id: UUID,
    db: AsyncSession = Depends(get_db_dependency),
) -> Response:
    await TemplateService(db).delete_template(template_id)
    return Response(status_code=204)
