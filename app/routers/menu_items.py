# app/routers/menu_items.py
import uuid

from fastapi import (
    APIRouter,
    Depends,
    File,
    HTTPException,
    UploadFile,
    status,
)
from sqlmodel import Session

from app.core.auth import require_vendor
from app.database import get_session
from app.models.user import User
from app.repositories.menu_item_repo import MenuItemRepository
from app.repositories.vendor_repo import VendorRepository
from app.schemas.vendor import (
    AvailabilityUpdate,
    MenuItemCreate,
    MenuItemRead,
    MenuItemUpdate,
)
from app.services.menu_item_service import MenuItemService

router = APIRouter(prefix="/menu-items", tags=["Menu items"])

menu_item_repo = MenuItemRepository()
vendor_repo = VendorRepository()
service = MenuItemService(menu_item_repo, vendor_repo)


# -------- Public endpoints --------


@router.get("", response_model=list[MenuItemRead])
def list_menu_items(
    session: Session = Depends(get_session),
    vendor_id: uuid.UUID | None = None,
    is_available: bool | None = None,
    search: str | None = None,
    skip: int = 0,
    limit: int = 50,
):
    """
    List menu items.

    - Public endpoint.
    - Filter by vendor, availability or a name/description search.
    """
    return service.list_items(
        session,
        vendor_id=vendor_id,
        is_available=is_available,
        search=search,
        skip=skip,
        limit=limit,
    )


# -------- Vendor endpoints --------


@router.get("/me", response_model=list[MenuItemRead])
def list_my_menu(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_vendor),
):
    """
    All items on the caller's menu, including unavailable ones.
    """
    return service.list_my_items(session, current_user)


@router.get("/{item_id}", response_model=MenuItemRead)
def get_menu_item(
    item_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a single menu item by id.

    - Public endpoint.
    """
    return service.get_item(session, item_id)


@router.post(
    "",
    response_model=MenuItemRead,
    status_code=status.HTTP_201_CREATED,
)
def create_menu_item(
    payload: MenuItemCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_vendor),
):
    """
    Add an item to the caller's menu.
    """
    return service.create_item(session, current_user, payload)


@router.patch("/{item_id}", response_model=MenuItemRead)
def update_menu_item(
    item_id: uuid.UUID,
    payload: MenuItemUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_vendor),
):
    """
    Update one of the caller's menu items.
    """
    return service.update_item(session, item_id, current_user, payload)


@router.patch("/{item_id}/availability", response_model=MenuItemRead)
def set_availability(
    item_id: uuid.UUID,
    payload: AvailabilityUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_vendor),
):
    """
    Toggle whether the item can be ordered.
    """
    return service.set_availability(session, item_id, current_user, payload.is_available)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_menu_item(
    item_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_vendor),
):
    """
    Delete a menu item that was never ordered or reviewed.
    """
    service.delete_item(session, item_id, current_user)
    return None


@router.post(
    "/{item_id}/image",
    response_model=MenuItemRead,
    summary="Upload or replace the image for a menu item",
)
def upload_image(
    item_id: uuid.UUID,
    file: UploadFile = File(...),
    session: Session = Depends(get_session),
    current_user: User = Depends(require_vendor),
):
    """
    Upload a new image for the menu item.

    - Accepts JPEG, PNG, WEBP.
    - Overwrites any previous image.
    """
    if not file.content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing content-type for uploaded file",
        )

    file_bytes = file.file.read()
    return service.set_image(
        session=session,
        item_id=item_id,
        actor=current_user,
        content_type=file.content_type,
        file_bytes=file_bytes,
    )
