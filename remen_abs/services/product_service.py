# remen_abs/services/product_service.py
import logging
import uuid
from typing import Iterable

from fastapi import HTTPException, status
from sqlmodel import Session

from remen_abs.core.storage_utils import (
    delete_public_urls,
    generate_object_path,
    upload_to_storage,
)
from remen_abs.models.product import Product
from remen_abs.repositories.product_repo import ProductRepository
from remen_abs.schemas.product import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB per image

ALLOWED_IMAGE_CONTENT_TYPES: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


class ProductService:
    """
    Business logic for the ABS module catalog.

    Responsibilities:
      - listing / lookup (public)
      - create, update, delete, sold-out marking (admin)
      - image upload/delete orchestration with Supabase Storage
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    # ----- Helpers -----

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

    # ----- Products -----

    def list_products(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        brand: str | None = None,
        available_only: bool = False,
    ) -> list[Product]:
        return self.repo.list_products(
            session,
            skip=skip,
            limit=limit,
            brand=brand,
            available_only=available_only,
        )

    def get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    def create_product(self, session: Session, payload: ProductCreate) -> Product:
        data = payload.model_dump(exclude={"inspection_results"})
        product = Product(**data)
        if payload.inspection_results is not None:
            product.inspection_results = payload.inspection_results.model_dump(by_alias=True)
        return self.repo.create(session, product)

    def update_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> Product:
        """
        Partial update; only fields present in the payload change.
        """
        product = self.get_product(session, product_id)

        changes = payload.model_dump(exclude_unset=True, exclude={"inspection_results"})
        for field, value in changes.items():
            if value is not None:
                setattr(product, field, value)

        if payload.inspection_results is not None:
            product.inspection_results = payload.inspection_results.model_dump(by_alias=True)

        return self.repo.update(session, product)

    def mark_sold_out(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.get_product(session, product_id)
        product.sold_out = True
        product.in_stock = False
        return self.repo.update(session, product)

    def delete_product(self, session: Session, product_id: uuid.UUID) -> None:
        """
        Delete a product and, best-effort, its images in Storage.
        """
        product = self.get_product(session, product_id)
        urls = [u for u in [product.image_url, *product.image_urls] if u]
        if urls:
            try:
                delete_public_urls(urls)
            except Exception:
                logger.exception("Could not delete images of product %s", product_id)
        self.repo.delete(session, product)

    # ----- Images -----

    def set_main_image(
        self,
        session: Session,
        product_id: uuid.UUID,
        content_type: str,
        file_bytes: bytes,
    ) -> Product:
        """
        Upload or replace the main image.

        Path pattern:
            <product_id>/main.<ext>
        """
        product = self.get_product(session, product_id)
        ext = self._validate_and_get_ext(content_type, file_bytes)

        path = generate_object_path(product.id, ext, name="main")
        product.image_url = upload_to_storage(path, file_bytes, content_type)
        return self.repo.update(session, product)

    def add_gallery_images(
        self,
        session: Session,
        product_id: uuid.UUID,
        files: Iterable[tuple[str, bytes]],
    ) -> Product:
        """
        Upload gallery images (random names) and append their URLs.

        Args:
            files: iterable of (content_type, file_bytes)
        """
        product = self.get_product(session, product_id)
        urls = list(product.image_urls)

        for content_type, file_bytes in files:
            ext = self._validate_and_get_ext(content_type, file_bytes)
            path = generate_object_path(product.id, ext)
            urls.append(upload_to_storage(path, file_bytes, content_type))

        product.image_urls = urls
        if not product.image_url and urls:
            product.image_url = urls[0]
        return self.repo.update(session, product)

    def remove_gallery_image(
        self,
        session: Session,
        product_id: uuid.UUID,
        url: str,
    ) -> Product:
        product = self.get_product(session, product_id)
        if url not in product.image_urls:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Image not found for this product",
            )

        delete_public_urls([url])
        product.image_urls = [u for u in product.image_urls if u != url]
        return self.repo.update(session, product)
