from fastapi import APIRouter


router = APIRouter()


@router.get("/health")
async def health():
    """Health check endpoint"""
    from llm_admin.services.catalog import model_catalog

    return {
        "status": "healthy",
        "catalog_loaded": model_catalog.is_loaded,
        "models": model_catalog.count_by_provider(),
    }
