from fastapi import APIRouter, Depends

from aicompass.categories import CATEGORIES
from aicompass.config import Config, get_config
from aicompass.router.api.params import GetCategoriesResponse

router = APIRouter(
    tags=["config"],
    prefix="/api/config",
)


@router.get("/categories")
async def get_categories(config: Config = Depends(get_config)) -> GetCategoriesResponse:
    return GetCategoriesResponse(categories=CATEGORIES, page_size=config.page_size)
