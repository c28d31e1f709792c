from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from textile_inventory.core.config import settings
from textile_inventory.core.dependencies import get_raw_material_service
from textile_inventory.models.material_filter import MaterialFilter, SortSpec
from textile_inventory.models.raw_material import (
    DeleteResult, InventorySummary, MaterialPage, RawMaterialCreate,
    RawMaterialRead, RawMaterialUpdate, StockAdjustment, StockSet
)
from textile_inventory.services.raw_material import RawMaterialService

router = APIRouter()


def get_material_filter(
    search: Optional[str] = Query(None, description="Matches name, supplier, location, color or quality"),
    category: Optional[str] = Query(None, description="Exact category, or 'all'"),
    category_group: Optional[str] = Query(None, description="fabric, towel, manufacturing, other or 'all'"),
    stock_level: Optional[str] = Query(None, description="in, low, out or 'all'"),
    price_min: Optional[str] = None,
    price_max: Optional[str] = None,
    stock_min: Optional[str] = None,
    stock_max: Optional[str] = None,
    created_from: Optional[str] = None,
    created_to: Optional[str] = None,
    restocked_from: Optional[str] = None,
    restocked_to: Optional[str] = None,
    color: Optional[str] = None,
    quality: Optional[str] = None,
    weight_min: Optional[str] = None,
    weight_max: Optional[str] = None,
    width_min: Optional[str] = None,
    width_max: Optional[str] = None,
    length_min: Optional[str] = None,
    length_max: Optional[str] = None,
) -> MaterialFilter:
    """
    Collects the list filters as raw strings. Malformed values are ignored
    by MaterialFilter instead of failing the request.
    """
    return MaterialFilter(
        search=search,
        category=category,
        category_group=category_group,
        stock_level=stock_level,
        price_min=price_min,
        price_max=price_max,
        stock_min=stock_min,
        stock_max=stock_max,
        created_from=created_from,
        created_to=created_to,
        restocked_from=restocked_from,
        restocked_to=restocked_to,
        color=color,
        quality=quality,
        weight_min=weight_min,
        weight_max=weight_max,
        width_min=width_min,
        width_max=width_max,
        length_min=length_min,
        length_max=length_max,
    )


def get_sort_spec(
    sort_by: Optional[str] = Query(None, description="name, category, stock, unit_price or last_restocked"),
    sort_dir: Optional[str] = Query(None, description="asc or desc"),
) -> SortSpec:
    return SortSpec(key=sort_by, direction=sort_dir)


@router.get(
    "/",
    response_model=MaterialPage,
    summary="List Raw Materials",
    description="Filtered, sorted and paginated view of the raw material inventory."
)
def list_materials(
    offset: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1, le=settings.max_page_size),
    filters: MaterialFilter = Depends(get_material_filter),
    sort: SortSpec = Depends(get_sort_spec),
    service: RawMaterialService = Depends(get_raw_material_service)
):
    return service.list_page(
        filters, sort, offset=offset, limit=limit or settings.default_page_size)


@router.get(
    "/summary",
    response_model=InventorySummary,
    summary="Inventory Summary",
    description="Total, in-stock, low-stock and out-of-stock counts plus stock value for the filtered view."
)
def summarize_materials(
    filters: MaterialFilter = Depends(get_material_filter),
    service: RawMaterialService = Depends(get_raw_material_service)
):
    return service.summarize(filters)


@router.get(
    "/status/low-stock",
    response_model=List[RawMaterialRead],
    summary="Reorder Candidates",
    description="Materials whose stock is below their reorder level, including empty ones."
)
def list_low_stock(
    service: RawMaterialService = Depends(get_raw_material_service)
):
    return service.list_low_stock()


@router.get(
    "/{material_id}",
    response_model=RawMaterialRead,
    summary="Get Raw Material"
)
def get_material(
    material_id: UUID,
    service: RawMaterialService = Depends(get_raw_material_service)
):
    return service.get_material(material_id)


@router.post(
    "/",
    response_model=RawMaterialRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Raw Material"
)
def create_material(
    payload: RawMaterialCreate,
    service: RawMaterialService = Depends(get_raw_material_service)
):
    """
    Adds a material to the inventory.

    - **Name** and **Category** are required.
    - **Stock**, **Unit price** and **Reorder level** cannot be negative.
    """
    return service.create_material(payload)


@router.put(
    "/{material_id}",
    response_model=RawMaterialRead,
    summary="Update Raw Material"
)
def replace_material(
    material_id: UUID,
    payload: RawMaterialCreate,
    service: RawMaterialService = Depends(get_raw_material_service)
):
    """
    Full update. Every editable field is taken from the payload.
    """
    data = RawMaterialUpdate.model_validate(payload.model_dump())
    return service.update_material(material_id, data)


@router.patch(
    "/{material_id}",
    response_model=RawMaterialRead,
    summary="Patch Raw Material"
)
def patch_material(
    material_id: UUID,
    payload: RawMaterialUpdate,
    service: RawMaterialService = Depends(get_raw_material_service)
):
    """
    Changes only the fields present in the payload.
    """
    return service.update_material(material_id, payload)


@router.post(
    "/{material_id}/stock",
    response_model=RawMaterialRead,
    summary="Adjust Stock",
    description="Adds a signed quantity to the stock. Fails if the stock would become negative."
)
def adjust_stock(
    material_id: UUID,
    payload: StockAdjustment,
    service: RawMaterialService = Depends(get_raw_material_service)
):
    return service.adjust_stock(material_id, payload.delta)


@router.put(
    "/{material_id}/stock",
    response_model=RawMaterialRead,
    summary="Set Stock",
    description="Overwrites the stock on hand and records a restock."
)
def set_stock(
    material_id: UUID,
    payload: StockSet,
    service: RawMaterialService = Depends(get_raw_material_service)
):
    return service.set_stock(material_id, payload.stock)


@router.post(
    "/{material_id}/image",
    response_model=RawMaterialRead,
    summary="Upload Material Image",
    description="Accepts a jpeg, png or webp file up to 5MB and replaces the current image."
)
def upload_image(
    material_id: UUID,
    image: UploadFile = File(..., description="Material photo."),
    service: RawMaterialService = Depends(get_raw_material_service)
):
    # One byte past the limit is enough to reject oversized files
    content = image.file.read(settings.max_image_size + 1)
    return service.attach_image(
        material_id, content, image.filename or "", content_type=image.content_type)


@router.delete(
    "/{material_id}",
    response_model=DeleteResult,
    status_code=status.HTTP_200_OK,
    summary="Delete Raw Material"
)
def delete_material(
    material_id: UUID,
    service: RawMaterialService = Depends(get_raw_material_service)
):
    """
    Deletes a material permanently along with its image.

    If the image cannot be removed the material is still deleted and the
    failure is reported in `asset_error`.
    """
    return service.delete_material(material_id)
