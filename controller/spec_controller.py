# controller/spec_controller.py
from fastapi import APIRouter, Depends
from model.api import (
    ERROR_RESPONSES,
    SearchResultModel,
    SearchSpecRequest,
    SearchSpecResponse,
    SpecVersionsResponse,
)
from service.validation_service import ValidationService
from util.constants import InternalURIs
from controller.controller_dependencies import get_validation_service

spec_router = APIRouter(responses=ERROR_RESPONSES)


@spec_router.post(InternalURIs.SEARCH_SPEC, response_model=SearchSpecResponse)
async def search_spec(
    payload: SearchSpecRequest,
    service: ValidationService = Depends(get_validation_service),
) -> SearchSpecResponse:
    version = service.resolve_version(payload.specVersion)
    matches = await service.search(payload.query, version, payload.topK)
    return SearchSpecResponse(
        specVersion=version,
        results=[SearchResultModel.from_entity(m) for m in matches],
    )


@spec_router.get(InternalURIs.SPEC_VERSIONS, response_model=SpecVersionsResponse)
async def spec_versions(
    service: ValidationService = Depends(get_validation_service),
) -> SpecVersionsResponse:
    return SpecVersionsResponse(
        versions=service.list_versions(), defaultVersion=service.default_version
    )
