"""IP geolocation API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from ipgeo_api.api.dependencies import RateLimit, get_ip_info_service, validated_query
from ipgeo_api.schemas.common import ErrorResponse
from ipgeo_api.schemas.ip_info import IpInfoResponse, IpLookupQuery
from ipgeo_api.services.ip_info import IPInfoService

router = APIRouter(
    prefix="/api",
    tags=["ip-info"],
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
        status.HTTP_504_GATEWAY_TIMEOUT: {"model": ErrorResponse},
    },
)


@router.get(
    "/ip-info",
    response_model=IpInfoResponse,
    dependencies=[Depends(RateLimit("general"))],
)
async def get_ip_info(
    query: Annotated[IpLookupQuery, Depends(validated_query("ipLookup"))],
    service: Annotated[IPInfoService, Depends(get_ip_info_service)],
):
    """Get geolocation data for an IP address, or for the server's own address."""
    data = await service.lookup(query.ip)
    return IpInfoResponse(data=data)
