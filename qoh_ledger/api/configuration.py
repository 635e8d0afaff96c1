from __future__ import annotations

from fastapi import APIRouter, Depends

from qoh_ledger.api.deps import get_configuration_service
from qoh_ledger.api.errors import domain_errors
from qoh_ledger.api.schemas import ConfigurationResponse, ConfigurationUpdateRequest
from qoh_ledger.services.configuration_service import ConfigurationService

router = APIRouter(prefix="/organizations/{organization_id}/configuration", tags=["configuration"])


@router.get("", response_model=ConfigurationResponse, summary="Current game terms for new games")
def get_configuration(
    organization_id: str,
    service: ConfigurationService = Depends(get_configuration_service),
) -> ConfigurationResponse:
    return ConfigurationResponse.from_domain(service.get(organization_id))


@router.put("", response_model=ConfigurationResponse, summary="Update game terms for future games")
def update_configuration(
    organization_id: str,
    payload: ConfigurationUpdateRequest,
    service: ConfigurationService = Depends(get_configuration_service),
) -> ConfigurationResponse:
    with domain_errors():
        config = service.update(organization_id, **payload.model_dump(exclude_none=True))
    return ConfigurationResponse.from_domain(config)
