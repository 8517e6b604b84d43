from typing import List, Optional

from sqlalchemy.orm import Session

from app.models.product import Product
from app.schemas.product import ProductCreate, ProductUpdate


# --------------------------
# LIST PRODUCTS
# --------------------------
def list_products(db: Session) -> List[Product]:
    """Newest first. Ties on created_at fall back to the higher id."""
    return (
        db.query(Product)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .all()
    )

# --------------------------
# GET PRODUCT
# --------------------------
def get_product(db: Session, product_id: int) -> Optional[Product]:
    return db.query(Product).filter(Product.id == product_id).first()

# --------------------------
# CREATE PRODUCT
# --------------------------
def create_product(db: Session, data: ProductCreate) -> int:
    product = Product(
        name=data.name,
        price=data.price,
        description=data.description,
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product.id

# --------------------------
# UPDATE PRODUCT
# --------------------------
def update_product(db: Session, product_id: int, data: ProductUpdate) -> int:
    """
    Overwrite name, price and description of one product.
    Returns the number of rows matched (0 when the id does not exist).
    """
    affected = (
        db.query(Product)
        .filter(Product.id == product_id)
        .update(
            {
                Product.name: data.name,
                Product.price: data.price,
                Product.description: data.description,
            }
        )
    )
    db.commit()
    return affected

# --------------------------
# DELETE PRODUCT
# --------------------------
def delete_product(db: Session, product_id: int) -> int:
    affected = db.query(Product).filter(Product.id == product_id).delete()
    db.commit()
    return affected
