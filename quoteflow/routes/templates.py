"""Mapping templates: CRUD plus JSON export and import."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse

from quoteflow.services.mapping import MappingSpecification
from quoteflow.storage import QuoteStore, TemplateRecord, get_store
from quoteflow.utils import validate_uuid

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_response(template: TemplateRecord) -> dict[str, Any]:
    return {
        "id": str(template.id),
        "name": template.name,
        "createdAt": template.created_at.isoformat(),
        "updatedAt": template.updated_at.isoformat(),
        **template.mapping_data,
    }


def _parse_body(payload: dict[str, Any], name_required: bool = True) -> tuple[str | None, dict]:
    """Split a template body into its name and canonical mapping data.

    Raises:
        HTTPException: 422 if a required name is missing
        InvalidMappingSpecification: If the mapping part does not validate
    """
    name = payload.get("name")
    if name is not None and (not isinstance(name, str) or not name.strip()):
        raise HTTPException(status_code=422, detail="Template name must be a non-empty string")
    if name is None and name_required:
        raise HTTPException(status_code=422, detail="Template name is required")

    spec = MappingSpecification.from_json({k: v for k, v in payload.items() if k != "name"})
    return (name.strip() if name else None), spec.to_json()


async def _get_or_404(store: QuoteStore, template_id: str) -> TemplateRecord:
    template = await store.get_template(validate_uuid(template_id, "template ID"))
    if template is None:
        raise HTTPException(status_code=404, detail="Template not found")
    return template


@router.get("")
async def list_templates(store: QuoteStore = Depends(get_store)):
    return [_to_response(t) for t in await store.list_templates()]


@router.post("", status_code=201)
async def create_template(
    payload: dict[str, Any] = Body(...),
    store: QuoteStore = Depends(get_store),
):
    """Create a template from a name plus a mapping specification."""
    name, mapping_data = _parse_body(payload)
    template = await store.create_template(name=name, mapping_data=mapping_data)
    logger.info(f"Created template {template.name} ({template.id})")
    return _to_response(template)


@router.post("/import", status_code=201)
async def import_template(
    payload: dict[str, Any] = Body(...),
    store: QuoteStore = Depends(get_store),
):
    """Import an exported template, including the older fileType/columns layout."""
    name, mapping_data = _parse_body(payload, name_required=False)
    template = await store.create_template(
        name=name or "Imported template", mapping_data=mapping_data
    )
    logger.info(f"Imported template {template.name} ({template.id})")
    return _to_response(template)


@router.get("/{template_id}")
async def get_template(template_id: str, store: QuoteStore = Depends(get_store)):
    return _to_response(await _get_or_404(store, template_id))


@router.get("/{template_id}/export")
async def export_template(template_id: str, store: QuoteStore = Depends(get_store)):
    """Download a template in its canonical JSON form."""
    template = await _get_or_404(store, template_id)
    filename = f"{template.name.replace(' ', '_')}.json"
    return JSONResponse(
        content={"name": template.name, **template.mapping_data},
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.put("/{template_id}")
async def update_template(
    template_id: str,
    payload: dict[str, Any] = Body(...),
    store: QuoteStore = Depends(get_store),
):
    """Replace a template's mapping; the name is kept when omitted."""
    name, mapping_data = _parse_body(payload, name_required=False)
    template = await store.update_template(
        validate_uuid(template_id, "template ID"), name=name, mapping_data=mapping_data
    )
    return _to_response(template)


@router.delete("/{template_id}", status_code=204)
async def delete_template(template_id: str, store: QuoteStore = Depends(get_store)):
    await store.delete_template(validate_uuid(template_id, "template ID"))
    logger.info(f"Deleted template {template_id}")
