from typing import Optional
from fastapi import APIRouter, HTTPException, Request
from starlette import status
from models.products import Product
from schemas.product_schemas import CreateProductRequest, UpdateProductRequest, ProductOut
from utils.deps import db_dependency, admin_dependency, store_dependency
from middleware.rate_limiter import limiter
from utils.logger import get_logger

# Setup logger
logger = get_logger(__name__)


router = APIRouter(
    prefix="/products",
    tags=["products"]
)


@router.get("/", response_model=list[ProductOut])
@limiter.limit("120/minute")
def list_products(request: Request, store: store_dependency, category: Optional[str] = None):
    return store.list_products(category=category)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: db_dependency):
    product = db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


@router.post("/", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(body: CreateProductRequest, admin: admin_dependency, db: db_dependency):
    product = Product(**body.model_dump())
    db.add(product)
    db.commit()
    db.refresh(product)

    logger.info(
        "Product created",
        extra={"product_id": product.id, "admin_id": admin.get("user_id")}
    )
    return product


@router.put("/{product_id}", response_model=ProductOut)
def update_product(product_id: int, body: UpdateProductRequest, admin: admin_dependency, db: db_dependency):
    product = db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(product, field, value)

    db.commit()
    db.refresh(product)

    logger.info(
        "Product updated",
        extra={"product_id": product.id, "admin_id": admin.get("user_id")}
    )
    return product


@router.delete("/{product_id}", status_code=status.HTTP_200_OK)
def delete_product(product_id: int, admin: admin_dependency, db: db_dependency):
    """
    Delete a product. Past order items keep their name and price snapshot.
    """
    product = db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    db.delete(product)
    db.commit()

    logger.info(
        "Product deleted",
        extra={"product_id": product_id, "admin_id": admin.get("user_id")}
    )
    return {"message": "Product deleted"}
