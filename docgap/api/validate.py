"""Issue validation endpoints.

The validator is built once in the application lifespan and resolved from
``app.state`` through :func:`get_validator`, so tests can override it with
``app.dependency_overrides``.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from docgap.models.validation_models import (
    CacheInvalidationRequest,
    CacheInvalidationResponse,
    ValidationRequest,
    ValidatorOutput,
)
from docgap.services.domain import (
    embeddings_cache_key,
    normalize_domain,
    sitemap_health_cache_key,
)
from docgap.services.validator import IssueValidator
from docgap.storage import ObjectStoreError

logger = logging.getLogger(__name__)
router = APIRouter()


def get_validator(request: Request) -> IssueValidator:
    """Return the process-wide validator built at startup."""
    return request.app.state.validator


@router.post(
    "/validate",
    response_model=ValidatorOutput,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
async def validate_issues(
    payload: ValidationRequest,
    validator: IssueValidator = Depends(get_validator),
):
    """Validate issues against a domain's documentation.

    Returns 500 with the empty-shaped output when the pipeline fails as a whole.
    """
    logger.info(
        f"Validation requested: {len(payload.issues)} issues, domain={payload.domain}, "
        f"session={payload.session_id}"
    )
    output = await validator.run(payload)
    if output.error:
        logger.error(f"Validation failed for session {payload.session_id}: {output.message}")
        return JSONResponse(
            status_code=500,
            content=output.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
    return output


@router.post(
    "/cache/invalidate",
    response_model=CacheInvalidationResponse,
    response_model_by_alias=True,
)
async def invalidate_cache(
    payload: CacheInvalidationRequest,
    validator: IssueValidator = Depends(get_validator),
):
    """Drop the embedding and sitemap health caches for a domain."""
    domain = normalize_domain(payload.domain)
    try:
        await validator.invalidate_caches(domain)
    except ObjectStoreError as e:
        logger.error(f"Cache invalidation failed for {domain}: {e}")
        raise HTTPException(status_code=500, detail="Cache invalidation failed") from e

    logger.info(f"Caches invalidated for {domain}")
    return CacheInvalidationResponse(
        domain=domain,
        invalidated_keys=[embeddings_cache_key(domain), sitemap_health_cache_key(domain)],
    )
