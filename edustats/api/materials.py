"""Material catalog endpoints.

Every authenticated role can read the catalog; only admins change it.
Titles are unique (409 on a clash), and summary reports key material
counts by title.
"""

from __future__ import annotations

import datetime
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import Field

from edustats.api.dependencies import MaterialStore, require_any_role
from edustats.api.schemas import CamelModel, MessageOut
from edustats.core.errors import Conflict, NotFound
from edustats.models.ids import parse_id
from edustats.models.material import Material
from edustats.models.principal import Principal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/materials", tags=["materials"])

_require_admin = require_any_role({"admin"})
_require_reader = require_any_role({"admin", "teacher", "student"})


class MaterialIn(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    formula: str = Field(min_length=1)
    example: str = Field(min_length=1)


class MaterialUpdateIn(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1)
    formula: str | None = Field(default=None, min_length=1)
    example: str | None = Field(default=None, min_length=1)


class MaterialOut(CamelModel):
    id: str
    title: str
    description: str
    formula: str
    example: str
    created_at: datetime.datetime
    updated_at: datetime.datetime

    @classmethod
    def from_material(cls, m: Material) -> MaterialOut:
        return cls(
            id=str(m.id),
            title=m.title,
            description=m.description,
            formula=m.formula,
            example=m.example,
            created_at=m.created_at,
            updated_at=m.updated_at,
        )


class MaterialResponse(CamelModel):
    message: str
    material: MaterialOut


class MaterialListResponse(CamelModel):
    message: str
    materials: list[MaterialOut]


async def _get_or_404(materials: MaterialStore, raw_id: str) -> Material:
    material = await materials.get(parse_id(raw_id, what="Material"))
    if material is None:
        raise NotFound("Material not found")
    return material


@router.get("", response_model=MaterialListResponse)
async def list_materials(
    _principal: Annotated[Principal, Depends(_require_reader)],
    materials: MaterialStore,
) -> MaterialListResponse:
    found = await materials.list_all()
    return MaterialListResponse(
        message="Materials retrieved",
        materials=[MaterialOut.from_material(m) for m in found],
    )


@router.get("/{id}", response_model=MaterialResponse)
async def get_material(
    id: str,
    _principal: Annotated[Principal, Depends(_require_reader)],
    materials: MaterialStore,
) -> MaterialResponse:
    material = await _get_or_404(materials, id)
    return MaterialResponse(
        message="Material retrieved", material=MaterialOut.from_material(material)
    )


@router.post("", response_model=MaterialResponse, status_code=status.HTTP_201_CREATED)
async def create_material(
    body: MaterialIn,
    principal: Annotated[Principal, Depends(_require_admin)],
    materials: MaterialStore,
) -> MaterialResponse:
    if await materials.get_by_title(body.title) is not None:
        logger.warning("Rejected duplicate material title=%r", body.title)
        raise Conflict("Material with this title already exists")

    material = Material.new(
        title=body.title,
        description=body.description,
        formula=body.formula,
        example=body.example,
    )
    await materials.add(material)
    logger.info(
        "Material created id=%s title=%r by user=%s",
        material.id,
        material.title,
        principal.user_id,
    )
    return MaterialResponse(
        message="Material created", material=MaterialOut.from_material(material)
    )


@router.put("/{id}", response_model=MaterialResponse)
async def update_material(
    id: str,
    body: MaterialUpdateIn,
    principal: Annotated[Principal, Depends(_require_admin)],
    materials: MaterialStore,
) -> MaterialResponse:
    material = await _get_or_404(materials, id)

    changes = body.model_dump(exclude_none=True)
    new_title = changes.get("title")
    if new_title is not None and new_title != material.title:
        if await materials.get_by_title(new_title) is not None:
            logger.warning("Rejected material rename to duplicate title=%r", new_title)
            raise Conflict("Material with this title already exists")

    if changes:
        material = material.with_changes(**changes)
        await materials.update(material)
        logger.info(
            "Material updated id=%s fields=%s by user=%s",
            material.id,
            sorted(changes),
            principal.user_id,
        )

    return MaterialResponse(
        message="Material updated", material=MaterialOut.from_material(material)
    )


@router.delete("/{id}", response_model=MessageOut)
async def delete_material(
    id: str,
    principal: Annotated[Principal, Depends(_require_admin)],
    materials: MaterialStore,
) -> MessageOut:
    material_id = parse_id(id, what="Material")
    if not await materials.delete(material_id):
        raise NotFound("Material not found")
    logger.info("Material deleted id=%s by user=%s", material_id, principal.user_id)
    return MessageOut(message="Material deleted successfully")
