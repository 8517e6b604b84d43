from typing import Optional

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from app.core.templating import render_error, templates
from app.database.connection import get_db
from app.schemas.product import ProductCreate, ProductUpdate
from app.services.product_service import (
    create_product, get_product, list_products,
    update_product, delete_product,
)


router = APIRouter(prefix="/products", tags=["Products"])

# Message shown on the 500 page when the store fails inside a handler
ERROR_MESSAGES = {
    "list_all": "Error while fetching products",
    "get": "Error while fetching the product",
    "create": "Error while creating the product",
    "show_edit_form": "Error while fetching the product",
    "update": "Error while updating the product",
    "delete": "Error while deleting the product",
}


def _not_found(request: Request):
    return render_error(request, status.HTTP_404_NOT_FOUND, "Error", "Product not found")


def _to_list():
    return RedirectResponse(url="/products", status_code=status.HTTP_303_SEE_OTHER)


# LIST
@router.get("")
def list_all(request: Request, db: Session = Depends(get_db)):
    products = list_products(db)
    return templates.TemplateResponse(
        request,
        "products/index.html",
        {"title": "Product list", "products": products},
    )

# CREATE FORM
# declared before /{product_id} so "create" is never parsed as an id
@router.get("/create")
def show_create_form(request: Request):
    return templates.TemplateResponse(
        request,
        "products/create.html",
        {"title": "Add a product"},
    )

# CREATE
@router.post("/create")
def create(
    name: str = Form(""),
    price: float = Form(...),
    description: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    # an empty textarea stores NULL
    create_product(db, ProductCreate(name=name, price=price, description=description or None))
    return _to_list()

# GET BY ID
@router.get("/{product_id}")
def get(request: Request, product_id: int, db: Session = Depends(get_db)):
    product = get_product(db, product_id)
    if not product:
        return _not_found(request)
    return templates.TemplateResponse(
        request,
        "products/details.html",
        {"title": product.name, "product": product},
    )

# EDIT FORM
@router.get("/edit/{product_id}")
def show_edit_form(request: Request, product_id: int, db: Session = Depends(get_db)):
    product = get_product(db, product_id)
    if not product:
        return _not_found(request)
    return templates.TemplateResponse(
        request,
        "products/edit.html",
        {"title": "Edit product", "product": product},
    )

# UPDATE
@router.post("/{product_id}/update")
def update(
    request: Request,
    product_id: int,
    name: str = Form(""),
    price: float = Form(...),
    description: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    updated = update_product(
        db, product_id, ProductUpdate(name=name, price=price, description=description or None)
    )
    if not updated:
        return _not_found(request)
    return _to_list()

# DELETE
@router.post("/{product_id}/delete")
def delete(request: Request, product_id: int, db: Session = Depends(get_db)):
    deleted = delete_product(db, product_id)
    if not deleted:
        return _not_found(request)
    return _to_list()
