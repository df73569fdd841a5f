from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from hourbook.api.v1.schemas import InstanceConfigSchema
from hourbook.application.use_cases.instance_config import InstanceConfigService
from hourbook.wiring.dependencies import get_instance_config_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/config", response_model=InstanceConfigSchema)
def get_config(service: InstanceConfigService = Depends(get_instance_config_service)):
    try:
        config = service.get_config()
    except Exception as e:
        logger.exception("Failed to fetch configuration", extra={"error": str(e)})
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch configuration", "code": "config_unavailable"},
        )
    return InstanceConfigSchema.model_validate(config.to_dict())
