import logging
from functools import lru_cache
from typing import List, Optional, Union

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from plutusscan import __version__
from plutusscan.blueprint import read_blueprint
from plutusscan.errors import PlutusScanError
from plutusscan.metadata import CompilerType, VerificationMetadata, build_parameter_map, build_submission
from plutusscan.parameters import encode_for_schema, encode_parameter_value
from plutusscan.resolver import ParameterInput, Parameterizer, load_parameterizer, resolve
from plutusscan.schema import ParameterSchema, suggests_reference
from plutusscan.verifier import compare_hashes, parse_expected_hashes, verify_resolution

from .config import (
    CARDANO_NETWORK, CHUNK_SIZE, EXPLORER_URL, LOG_JSON, LOG_LEVEL, MAX_PASSES,
    PARAMETERIZER, RESOLVE_RPM, ENV, is_debug, is_production, validate_config,
)
from .logging_config import audit_log, configure_logging, set_request_id
from .models import BlueprintRequest, CompareRequest, MetadataEncodeRequest, ParameterEncodeRequest, ResolveRequest
from .rate_limit import RateLimiter

logger = logging.getLogger(__name__)

app = FastAPI(title="PlutusScan Registry Encoder", version=__version__)

resolve_limiter = RateLimiter(RESOLVE_RPM)


@app.on_event("startup")
def _startup():
    configure_logging("DEBUG" if is_debug() else LOG_LEVEL, json_format=LOG_JSON)
    logger.info("PlutusScan service starting (env=%s, network=%s)", ENV, CARDANO_NETWORK)


@app.middleware("http")
async def request_context(request: Request, call_next):
    request_id = set_request_id(request.headers.get("X-Request-ID"))
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(PlutusScanError)
async def plutusscan_error_handler(request: Request, exc: PlutusScanError):
    audit_log.parameter_rejected(exc.kind.value, exc.message)
    return JSONResponse(status_code=400, content=exc.to_dict())


@lru_cache(maxsize=4)
def _load_parameterizer(target: str) -> Parameterizer:
    return load_parameterizer(target)


def get_parameterizer() -> Optional[Parameterizer]:
    """The configured parameterization primitive, or None."""
    if not PARAMETERIZER:
        return None
    try:
        return _load_parameterizer(PARAMETERIZER)
    except (ImportError, ValueError) as e:
        logger.error("Cannot load parameterizer %s: %s", PARAMETERIZER, e)
        return None


def _hash_list(value: Union[str, List[str], None]) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return parse_expected_hashes(value)
    return [v.strip().lower() for v in value if v and v.strip()]


@app.get("/health")
def health():
    body = {
        "status": "ok",
        "version": __version__,
        "network": CARDANO_NETWORK,
        "explorer_url": EXPLORER_URL,
        "parameterizer_configured": bool(PARAMETERIZER),
    }
    if not is_production():
        body["config"] = validate_config()
    return body


@app.post("/parameters/encode")
def encode_parameter(req: ParameterEncodeRequest):
    if req.type_schema is not None:
        schema = ParameterSchema.from_dict({"schema": req.type_schema})
        encoded = encode_for_schema(req.value, schema, req.passthrough)
        return {
            "encoded": encoded,
            "type": schema.type_name,
            "classification": schema.classification.value,
        }

    encoded = encode_parameter_value(req.value, req.classification, req.passthrough)
    return {"encoded": encoded, "classification": req.classification.value}


@app.post("/metadata/encode")
def encode_metadata(req: MetadataEncodeRequest):
    metadata = VerificationMetadata(
        source_url=req.source_url,
        commit_hash=req.commit_hash,
        compiler_version=req.compiler_version,
        parameters=req.parameters,
        source_path=req.source_path,
        compiler_type=CompilerType.from_name(req.compiler_type),
    )
    submission = build_submission(metadata, req.chunk_size or CHUNK_SIZE)

    audit_log.metadata_encoded(
        commit_hash=metadata.commit_hash,
        script_count=len(metadata.parameters),
        size_bytes=submission.size_bytes,
        chunk_count=len(submission.chunks),
    )
    return submission.to_dict()


@app.post("/blueprint/validators")
def blueprint_validators(req: BlueprintRequest):
    validators = read_blueprint(req.blueprint, req.compiler_version)
    listed = []
    for v in validators:
        d = v.to_dict()
        for slot, schema in zip(d["parameters"], v.parameters):
            slot["mode"] = "reference" if suggests_reference(schema.title) else "value"
        listed.append(d)
    return {"count": len(validators), "validators": listed}


@app.post("/resolve")
def resolve_hashes(
    req: ResolveRequest,
    request: Request,
    parameterizer: Optional[Parameterizer] = Depends(get_parameterizer),
):
    client_id = request.client.host if request.client else "anonymous"
    limit = resolve_limiter.check(client_id)
    if not limit.allowed:
        audit_log.rate_limit_exceeded(client_id, "/resolve")
        raise HTTPException(429, "RATE_LIMIT", headers={"Retry-After": str(int(limit.retry_after or 0) + 1)})
    if parameterizer is None:
        raise HTTPException(503, "PARAMETERIZER_NOT_CONFIGURED")

    validators = read_blueprint(req.blueprint, req.compiler_version)
    try:
        inputs = {
            key: [ParameterInput(**slot.model_dump()) for slot in slots]
            for key, slots in req.inputs.items()
        }
        result = resolve(validators, inputs, parameterizer, req.max_passes or MAX_PASSES)
    except PlutusScanError:
        raise
    except ValueError as e:
        raise HTTPException(400, str(e))

    audit_log.resolution_completed(
        validator_count=len(validators),
        converged=result.converged,
        passes_used=result.passes_used,
        warnings=[w.kind.value for w in result.warnings],
    )

    response = result.to_dict()
    response["parameter_map"] = build_parameter_map(validators, result)
    if req.expected_hashes is not None:
        response["comparison"] = verify_resolution(validators, result, _hash_list(req.expected_hashes)).to_dict()
    return response


@app.post("/compare")
def compare(req: CompareRequest):
    return compare_hashes(_hash_list(req.actual), _hash_list(req.expected)).to_dict()
