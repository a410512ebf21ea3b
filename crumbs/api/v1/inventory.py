from uuid import UUID
from fastapi import APIRouter, Depends, status
from crumbs.core.auth import SessionUser, require_user_session
from crumbs.schemas.inventory import AddStockRequest, InventoryItemCreate, InventoryItemResponse, InventoryItemUpdate
from crumbs.schemas.response import SuccessResponse
from crumbs.services.inventory_service import (
    add_stock,
    create_item,
    delete_item,
    get_item,
    list_items,
    update_item,
)

router = APIRouter()


def _item_data(item) -> dict:
    return InventoryItemResponse.model_validate(item).model_dump(mode="json")


@router.get("/", response_model=SuccessResponse)
async def list_inventory_endpoint(session: SessionUser = Depends(require_user_session)):
    """Lists the tenant's inventory, oldest first."""
    items = await list_items(session.id)
    return SuccessResponse(data=[_item_data(i) for i in items])


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_inventory_endpoint(item_data: InventoryItemCreate,
                                    session: SessionUser = Depends(require_user_session)):
    """Adds a new inventory item; its stock starts at the purchase quantity."""
    item = await create_item(session.id, item_data)
    return SuccessResponse(data=_item_data(item))


@router.get("/{item_id}", response_model=SuccessResponse)
async def get_inventory_endpoint(item_id: UUID, session: SessionUser = Depends(require_user_session)):
    item = await get_item(session.id, item_id)
    return SuccessResponse(data=_item_data(item))


@router.patch("/{item_id}", response_model=SuccessResponse)
async def update_inventory_endpoint(item_id: UUID, patch: InventoryItemUpdate,
                                    session: SessionUser = Depends(require_user_session)):
    item = await update_item(session.id, item_id, patch)
    return SuccessResponse(data=_item_data(item))


@router.delete("/{item_id}", response_model=SuccessResponse)
async def delete_inventory_endpoint(item_id: UUID, session: SessionUser = Depends(require_user_session)):
    await delete_item(session.id, item_id)
    return SuccessResponse(data={"id": str(item_id)})


@router.post("/{item_id}/stock", response_model=SuccessResponse)
async def add_stock_endpoint(item_id: UUID, payload: AddStockRequest,
                             session: SessionUser = Depends(require_user_session)):
    """Adds a positive quantity to the item's current stock."""
    item = await add_stock(session.id, item_id, payload)
    return SuccessResponse(data=_item_data(item))
