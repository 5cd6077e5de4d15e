# remen_abs/routers/products.py
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

from remen_abs.core.auth import require_admin
from remen_abs.database import get_session
from remen_abs.repositories.product_repo import ProductRepository
from remen_abs.schemas.product import ProductCreate, ProductRead, ProductUpdate
from remen_abs.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
service = ProductService(repo)


# -------- Public endpoints --------


@router.get("", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    brand: str | None = None,
    available_only: bool = False,
):
    """
    List products, newest first.

    - `brand` filters by vehicle brand.
    - `available_only=True` hides sold-out modules.
    """
    return service.list_products(
        session,
        skip=skip,
        limit=limit,
        brand=brand,
        available_only=available_only,
    )


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.get_product(session, product_id)


# -------- Admin endpoints --------


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    return service.create_product(session, payload)


@router.patch(
    "/{product_id}",
    response_model=ProductRead,
    dependencies=[Depends(require_admin)],
)
def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
):
    return service.update_product(session, product_id, payload)


@router.post(
    "/{product_id}/sold-out",
    response_model=ProductRead,
    dependencies=[Depends(require_admin)],
)
def mark_sold_out(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Flag a module as sold (out of stock).
    """
    return service.mark_sold_out(session, product_id)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Delete a product and its stored images.
    """
    service.delete_product(session, product_id)
    return None


def _read_upload(file: UploadFile) -> tuple[str, bytes]:
    if not file.content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing content-type for uploaded file",
        )
    return file.content_type, file.file.read()


@router.post(
    "/{product_id}/image",
    response_model=ProductRead,
    dependencies=[Depends(require_admin)],
    summary="Upload or replace the main product image",
)
def upload_main_image(
    product_id: uuid.UUID,
    file: UploadFile = File(...),
    session: Session = Depends(get_session),
):
    content_type, file_bytes = _read_upload(file)
    return service.set_main_image(session, product_id, content_type, file_bytes)


@router.post(
    "/{product_id}/gallery",
    response_model=ProductRead,
    dependencies=[Depends(require_admin)],
    summary="Upload one or more gallery images",
)
def upload_gallery_images(
    product_id: uuid.UUID,
    files: list[UploadFile] = File(...),
    session: Session = Depends(get_session),
):
    """
    Accepts JPEG, PNG, WEBP (max 5MB each); new images are appended.
    """
    if not files:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No files uploaded",
        )
    payload = [_read_upload(f) for f in files]
    return service.add_gallery_images(session, product_id, payload)


@router.delete(
    "/{product_id}/gallery",
    response_model=ProductRead,
    dependencies=[Depends(require_admin)],
    summary="Delete a gallery image by URL",
)
def delete_gallery_image(
    product_id: uuid.UUID,
    url: str,
    session: Session = Depends(get_session),
):
    return service.remove_gallery_image(session, product_id, url)
