from fastapi import APIRouter, Depends, Request

from webshop.catalog.service import CatalogService

router = APIRouter(prefix="/api/products", tags=["Catalog API"])

def get_catalog_service(request: Request) -> CatalogService:
    return request.app.state.catalog_service

# module webshop.catalog.views
@router.get("")
def list_products(service: CatalogService = Depends(get_catalog_service)):
    return service.list_products()

@router.get("/{product_id}")
def get_product(product_id: str, service: CatalogService = Depends(get_catalog_service)):
    return service.get_product(product_id)
