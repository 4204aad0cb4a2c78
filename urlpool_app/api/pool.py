import json

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse, Response

from urlpool_app.config import settings
from urlpool_app.dependencies import get_url_pool_service, require_secret
from urlpool_app.exceptions import InvalidURLError
from urlpool_app.services.url_pool_service import URLPoolService

router = APIRouter(tags=["pool"])


@router.post(
    "/",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_secret)],
)
async def submit_url(
    request: Request,
    url_service: URLPoolService = Depends(get_url_pool_service)
):
    """
    Add the URL in the raw request body to the pool.

    - 401: secret configured and header missing/wrong
    - 400: body is not an http(s) URL
    - 201: stored
    """
    body = await request.body()
    try:
        raw_url = body.decode("utf-8")
        await url_service.submit(raw_url)
    except (UnicodeDecodeError, InvalidURLError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    return Response(status_code=status.HTTP_201_CREATED)


@router.get("/")
async def get_random_url(url_service: URLPoolService = Depends(get_url_pool_service)):
    """
    Return one random URL from the pool as plain text.

    Responds 204 when the pool has nothing to sample.
    """
    headers = {"Access-Control-Allow-Origin": settings.allowed_origin}

    url = await url_service.get_random_url()
    if url is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT, headers=headers)

    return PlainTextResponse(url, headers=headers)


@router.get("/stats", dependencies=[Depends(require_secret)])
async def get_stats(url_service: URLPoolService = Depends(get_url_pool_service)):
    """Current shard counter as {"urlCount": ..., "urlPrefix": ...}"""
    stats = await url_service.get_stats()
    return Response(
        content=json.dumps(stats.model_dump(by_alias=True), indent=4),
        media_type="application/json"
    )
