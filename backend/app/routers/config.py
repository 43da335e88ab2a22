from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from ..models.v1.config_models import (
    EncodeConfigRequest,
    EncodeConfigResponse,
    ThresholdCheckRequest,
    ThresholdCheckResponse,
    ValidateConfigRequest,
    ValidateConfigResponse,
)
from ..services.config_service import (
    check_threshold_service,
    decode_config_binary_service,
    encode_config_binary_service,
    encode_config_service,
    validate_config_service,
)

router = APIRouter()


@router.post("/validate", response_model=ValidateConfigResponse, summary="Validate an evaluation config")
def validate_config(req: ValidateConfigRequest):
    """Always 200: problems are reported in `issues`, all of them at once."""
    return validate_config_service(req.config, apply_defaults=req.apply_defaults)


@router.post("/encode", response_model=EncodeConfigResponse, summary="Render a config as JSON or text format")
def encode_config(req: EncodeConfigRequest):
    return encode_config_service(req.config, req.format)


@router.post("/encode/binary", response_class=StreamingResponse, summary="Encode a config to the binary wire format")
def encode_config_binary(req: EncodeConfigRequest):
    payload_bytes, size = encode_config_binary_service(req.config)
    headers = {
        "Content-Disposition": 'attachment; filename="eval_config.pb"',
        "X-EVALCONF-Size": str(size),
    }
    return StreamingResponse(
        content=iter([payload_bytes]),
        media_type="application/octet-stream",
        headers=headers,
    )


@router.post("/decode/binary", summary="Decode a binary wire-format config")
async def decode_config_binary(request: Request):
    data = await request.body()
    return {"config": decode_config_binary_service(data)}


@router.post("/thresholds/check", response_model=ThresholdCheckResponse, summary="Check a value against a threshold")
def check_threshold(req: ThresholdCheckRequest):
    return check_threshold_service(req.threshold, req.value, req.baseline_value)
