# remen_abs/repositories/product_repo.py
import uuid

from sqlmodel import Session, select

from remen_abs.models.product import Product


class ProductRepository:
    """
    Data access layer for the catalog.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def list_products(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        brand: str | None = None,
        available_only: bool = False,
    ) -> list[Product]:
        stmt = select(Product)
        if brand:
            stmt = stmt.where(Product.brand == brand)
        if available_only:
            stmt = stmt.where(Product.sold_out == False)  # noqa: E712
        stmt = stmt.order_by(Product.created_at.desc()).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def list_ids(self, session: Session) -> list[tuple[uuid.UUID, object]]:
        stmt = select(Product.id, Product.created_at).order_by(Product.created_at.desc())
        return list(session.exec(stmt).all())

    def create(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def update(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def delete(self, session: Session, product: Product) -> None:
        session.delete(product)
        session.commit()
