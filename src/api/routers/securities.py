from typing import Annotated, List

from fastapi import APIRouter, Depends, Query, status

from src.api.routers.orders_config import get_order_desk_service
from src.core.models import Security
from src.core.orders import OrderDeskService
from src.core.securities import SecurityTypeFilter

router = APIRouter(tags=["Securities"])


@router.get(
    "/securities",
    response_model=List[Security],
    status_code=status.HTTP_200_OK,
    summary="Search Securities",
    description="Case-insensitive search on symbol or name, optionally filtered by type.",
)
def search_securities(
    query: Annotated[str, Query(description="Symbol or name fragment.", examples=["apple"])] = "",
    security_type: Annotated[
        SecurityTypeFilter,
        Query(alias="type", description="Security type filter.", examples=["Equity"]),
    ] = "All",
    service: Annotated[OrderDeskService, Depends(get_order_desk_service)] = None,
) -> List[Security]:
    return service.catalog.search(query=query, type_filter=security_type)
