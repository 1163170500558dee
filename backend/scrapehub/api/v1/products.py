"""Products API endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from scrapehub.dependencies import get_db
from scrapehub.schemas import ApiResponse, ListMeta, ProductResponse, ProductStatsResponse
from scrapehub.services.product_service import ProductService

router = APIRouter()


@router.get("", response_model=ApiResponse)
async def list_products(db: AsyncSession = Depends(get_db)):
    """List every stored product, most recently scraped first."""
    service = ProductService(db)
    products = await service.list_all()

    return ApiResponse(
        status="success",
        data=[ProductResponse.model_validate(p) for p in products],
        meta=ListMeta(total=len(products)),
    )


@router.get("/stats", response_model=ApiResponse)
async def product_statistics(db: AsyncSession = Depends(get_db)):
    """Totals per platform and the time of the last update."""
    service = ProductService(db)
    stats = await service.get_statistics()
    return ApiResponse(status="success", data=ProductStatsResponse(**stats))


@router.get("/{external_id}", response_model=ApiResponse)
async def get_product(external_id: str, db: AsyncSession = Depends(get_db)):
    """Get a single product by its platform ID."""
    service = ProductService(db)
    product = await service.find_by_external_id(external_id)

    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    return ApiResponse(status="success", data=ProductResponse.model_validate(product))
