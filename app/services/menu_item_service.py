import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.errors import ForbiddenError, InvalidStateError, NotFoundError
from app.core.storage_utils import delete_public_url, generate_filename, upload_to_storage
from app.models.menu_item import MenuItem
from app.models.user import User
from app.models.vendor import Vendor
from app.repositories.menu_item_repo import MenuItemRepository
from app.repositories.vendor_repo import VendorRepository
from app.schemas.vendor import MenuItemCreate, MenuItemUpdate


# --- Image config ---

MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB per image

ALLOWED_IMAGE_CONTENT_TYPES: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


class MenuItemService:
    """
    Business logic for menu items.

    Responsibilities:
      - vendor-owned CRUD (the caller's vendor profile owns new items)
      - availability toggling (read by order placement)
      - image upload/replace orchestration with Supabase Storage
    """

    def __init__(self, menu_item_repo: MenuItemRepository, vendor_repo: VendorRepository):
        self.menu_item_repo = menu_item_repo
        self.vendor_repo = vendor_repo

    # ----- Helpers -----

    def _my_vendor(self, session: Session, actor: User) -> Vendor:
        vendor = self.vendor_repo.get_by_owner(session, actor.id)
        if vendor is None:
            raise NotFoundError("Vendor profile not found")
        return vendor

    def _get_owned(self, session: Session, item_id: uuid.UUID, actor: User) -> MenuItem:
        vendor = self._my_vendor(session, actor)
        item = self.get_item(session, item_id)
        if item.vendor_id != vendor.id:
            raise ForbiddenError()
        return item

    @staticmethod
    def _validate_and_get_ext(content_type: str, file_bytes: bytes) -> str:
        if content_type not in ALLOWED_IMAGE_CONTENT_TYPES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Unsupported image type. Allowed: JPEG, PNG, WEBP.",
            )

        if len(file_bytes) > MAX_IMAGE_BYTES:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail="Image too large (max 5MB).",
            )

        return ALLOWED_IMAGE_CONTENT_TYPES[content_type]

    # ----- Public reads -----

    def list_items(
        self,
        session: Session,
        vendor_id: uuid.UUID | None = None,
        is_available: bool | None = None,
        search: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[MenuItem]:
        return self.menu_item_repo.list_items(
            session,
            vendor_id=vendor_id,
            is_available=is_available,
            search=search,
            skip=skip,
            limit=limit,
        )

    def get_item(self, session: Session, item_id: uuid.UUID) -> MenuItem:
        item = self.menu_item_repo.get_by_id(session, item_id)
        if item is None:
            raise NotFoundError("Menu item not found")
        return item

    # ----- Vendor operations -----

    def list_my_items(self, session: Session, actor: User) -> list[MenuItem]:
        vendor = self._my_vendor(session, actor)
        return self.menu_item_repo.list_items(session, vendor_id=vendor.id, limit=500)

    def create_item(self, session: Session, actor: User, payload: MenuItemCreate) -> MenuItem:
        vendor = self._my_vendor(session, actor)
        item = MenuItem(
            vendor_id=vendor.id,
            name=payload.name,
            description=payload.description,
            price=payload.price,
            is_available=payload.is_available,
        )
        return self.menu_item_repo.create(session, item)

    def update_item(
        self,
        session: Session,
        item_id: uuid.UUID,
        actor: User,
        payload: MenuItemUpdate,
    ) -> MenuItem:
        """
        Partial update. Price changes never affect placed orders
        (order items keep their own unit_price).
        """
        item = self._get_owned(session, item_id, actor)

        if payload.name is not None:
            item.name = payload.name
        if payload.description is not None:
            item.description = payload.description
        if payload.price is not None:
            item.price = payload.price
        if payload.is_available is not None:
            item.is_available = payload.is_available

        return self.menu_item_repo.update(session, item)

    def set_availability(
        self,
        session: Session,
        item_id: uuid.UUID,
        actor: User,
        is_available: bool,
    ) -> MenuItem:
        item = self._get_owned(session, item_id, actor)
        item.is_available = is_available
        return self.menu_item_repo.update(session, item)

    def delete_item(self, session: Session, item_id: uuid.UUID, actor: User) -> None:
        """
        Delete a menu item that no order or review references.
        Ordered items should be made unavailable instead.
        """
        item = self._get_owned(session, item_id, actor)
        if self.menu_item_repo.is_referenced(session, item.id):
            raise InvalidStateError(
                "Menu item has orders or reviews; mark it unavailable instead"
            )

        if item.image_url:
            delete_public_url(item.image_url)
        self.menu_item_repo.delete(session, item)

    def set_image(
        self,
        session: Session,
        item_id: uuid.UUID,
        actor: User,
        content_type: str,
        file_bytes: bytes,
    ) -> MenuItem:
        """
        Upload or replace the item's image.

        Path pattern:
            menu-items/<item_id>/<uuid>.<ext>
        """
        item = self._get_owned(session, item_id, actor)
        ext = self._validate_and_get_ext(content_type, file_bytes)

        # Best-effort cleanup of previous image
        if item.image_url:
            delete_public_url(item.image_url)

        path = f"menu-items/{item.id}/{generate_filename(ext)}"
        item.image_url = upload_to_storage(path, file_bytes)
        return self.menu_item_repo.update(session, item)
