import time
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path

from ..database import ItemRepository
from ..dependencies import get_item_repository
from ..models import APIResponse, Item, ItemCreate, ItemMutationResponse, ItemUpdate

router = APIRouter(
    prefix="/api/items",
    tags=["items"]
)


@router.get("", response_model=List[Item])
def list_items(items: ItemRepository = Depends(get_item_repository)):
    return items.list_items()


@router.post("", response_model=ItemMutationResponse)
def create_item(payload: ItemCreate, items: ItemRepository = Depends(get_item_repository)):
    item = Item(
        id=payload.id if payload.id is not None else int(time.time() * 1000),
        name=payload.name,
        rate=payload.rate,
    )
    return ItemMutationResponse(item=items.insert_item(item))


@router.put("/{item_id}", response_model=ItemMutationResponse)
def update_item(
    payload: ItemUpdate,
    item_id: int = Path(..., description="Item ID"),
    items: ItemRepository = Depends(get_item_repository),
):
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")
    item = items.update_item(item_id, changes)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return ItemMutationResponse(item=item)


@router.delete("/{item_id}", response_model=APIResponse)
def delete_item(
    item_id: int = Path(..., description="Item ID"),
    items: ItemRepository = Depends(get_item_repository),
):
    if not items.delete_item(item_id):
        raise HTTPException(status_code=404, detail="Item not found")
    return APIResponse(success=True, message=f"Item {item_id} deleted")
