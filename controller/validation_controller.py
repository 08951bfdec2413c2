# controller/validation_controller.py
from fastapi import APIRouter, status
from fastapi.params import Depends
from core.entities import AggregateVerdict
from model.api import (
    ERROR_RESPONSES,
    AggregateResponse,
    ValidateCodeRequest,
    ValidateContentRequest,
    ValidationReportResponse,
)
from service.validation_service import ValidationService
from util.constants import InternalURIs
from controller.controller_dependencies import get_validation_service

validation_router = APIRouter(responses=ERROR_RESPONSES)


@validation_router.post(
    InternalURIs.VALIDATE_CONTENT,
    response_model=ValidationReportResponse | AggregateResponse,
    status_code=status.HTTP_200_OK,
)
async def validate_content(
    payload: ValidateContentRequest,
    service: ValidationService = Depends(get_validation_service),
) -> ValidationReportResponse | AggregateResponse:
    result = await service.validate_content(
        payload.content, payload.specVersion, payload.useChunking
    )
    if isinstance(result, AggregateVerdict):
        return AggregateResponse.from_entity(result)
    return ValidationReportResponse.from_entity(result)


@validation_router.post(
    InternalURIs.VALIDATE_CODE,
    response_model=ValidationReportResponse,
    status_code=status.HTTP_200_OK,
)
async def validate_code(
    payload: ValidateCodeRequest,
    service: ValidationService = Depends(get_validation_service),
) -> ValidationReportResponse:
    report = await service.validate_code(
        payload.code, payload.specVersion, payload.language
    )
    return ValidationReportResponse.from_entity(report)
