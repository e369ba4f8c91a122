"""Destination column definitions managed by users."""

import logging

from fastapi import APIRouter, Depends

from quoteflow.enums import DataType
from quoteflow.schemas import CamelModel
from quoteflow.storage import ColumnRecord, QuoteStore, get_store
from quoteflow.utils import validate_uuid

logger = logging.getLogger(__name__)

router = APIRouter()


class ColumnCreate(CamelModel):
    name: str
    data_type: DataType = DataType.STRING
    required: bool = False
    default_value: str | None = None


class ColumnUpdate(CamelModel):
    name: str | None = None
    data_type: DataType | None = None
    required: bool | None = None
    default_value: str | None = None


class ColumnResponse(CamelModel):
    id: str
    name: str
    data_type: str
    required: bool
    default_value: str | None = None


def _to_response(column: ColumnRecord) -> ColumnResponse:
    return ColumnResponse(
        id=str(column.id),
        name=column.name,
        data_type=str(column.data_type),
        required=column.required,
        default_value=column.default_value,
    )


@router.get("", response_model=list[ColumnResponse])
async def list_columns(store: QuoteStore = Depends(get_store)):
    """List column definitions in creation order."""
    return [_to_response(c) for c in await store.list_columns()]


@router.post("", response_model=ColumnResponse, status_code=201)
async def create_column(body: ColumnCreate, store: QuoteStore = Depends(get_store)):
    column = await store.create_column(
        name=body.name,
        data_type=body.data_type,
        required=body.required,
        default_value=body.default_value,
    )
    logger.info(f"Created column {column.name} ({column.data_type})")
    return _to_response(column)


@router.put("/{column_id}", response_model=ColumnResponse)
async def update_column(
    column_id: str,
    body: ColumnUpdate,
    store: QuoteStore = Depends(get_store),
):
    """Update only the fields present in the request body."""
    changes = {
        key: value
        for key, value in body.model_dump(exclude_unset=True).items()
        if value is not None or key == "default_value"
    }
    column = await store.update_column(validate_uuid(column_id, "column ID"), **changes)
    return _to_response(column)


@router.delete("/{column_id}", status_code=204)
async def delete_column(column_id: str, store: QuoteStore = Depends(get_store)):
    await store.delete_column(validate_uuid(column_id, "column ID"))
