import asyncio
import collections.abc
import itertools
import json
from typing import Any, Optional

import aiohttp

from kubecall._cogs.aiokits import aiotime
from kubecall._cogs.clients import auth, errors
from kubecall._cogs.configs import configuration
from kubecall._cogs.helpers import typedefs
from kubecall._cogs.structs import requests

JSON_CONTENT_TYPE = 'application/json'
PATCH_CONTENT_TYPE = 'application/strategic-merge-patch+json'


async def request(
        request: requests.APIRequest,
        *,
        shape: Any = None,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        logger: typedefs.Logger,
) -> Any:
    """
    Execute the request and parse its response into the expected shape.

    The shape is a type or a tuple of types (as in ``isinstance()``)
    of the top-level JSON value: usually ``dict``. If the shape is ``None``,
    the response body is not parsed at all, and ``None`` is returned.
    """
    body = await execute(request, context=context, settings=settings, logger=logger)
    if shape is None:
        return None
    return errors.parse_response(body, shape=shape)


async def execute(
        request: requests.APIRequest,
        *,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        logger: typedefs.Logger,
) -> bytes:
    """
    Perform the request with retries on the transport failures, return the raw body.

    HTTP errors are not retried, including the server-side 5xx errors:
    once the server has responded, the request could have had its effects
    (e.g. an object created), so it is not safe to repeat it blindly.
    """
    if context.fake:
        return errors.EMPTY_BODY

    # Serialize once: all the attempts send exactly the same bytes.
    data = json.dumps(request.payload).encode('utf-8') if request.payload is not None else None

    backoffs = settings.networking.error_backoffs
    backoffs = backoffs if isinstance(backoffs, collections.abc.Iterable) else [backoffs]
    count = len(backoffs) + 1 if isinstance(backoffs, collections.abc.Sized) else None
    backoff: Optional[float]
    for retry, backoff in enumerate(itertools.chain(backoffs, [None]), start=1):
        idx = f"#{retry}/{count}" if count is not None else f"#{retry}"
        what = f"{request.method} {request.path}"
        try:
            if retry > 1:
                logger.debug(f"Request attempt {idx}: {what}")

            response = await invoke(request, data=data, context=context, settings=settings)

        except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
            if backoff is None:  # i.e. the last or the only attempt.
                logger.error(f"Request attempt {idx} failed; escalating: {what} -> {e!r}")
                raise
            else:
                logger.error(f"Request attempt {idx} failed; will retry: {what} -> {e!r}")
                await aiotime.sleep(backoff)
        else:
            if retry > 1:
                logger.debug(f"Request attempt {idx} succeeded: {what}")
            return await interpret(response)

    raise RuntimeError("Broken retryable routine.")  # impossible, but needed for type-checking.


async def invoke(
        request: requests.APIRequest,
        *,
        data: Optional[bytes],
        context: auth.APIContext,
        settings: configuration.ClientSettings,
) -> aiohttp.ClientResponse:
    """
    Issue a single HTTP request. The caller owns the response and must close it.

    The ``Authorization: Bearer`` header is sent only when there is a token:
    an empty token would be rejected anyway, while anonymous requests can be
    allowed by the cluster's RBAC (e.g. for the health endpoints).
    """
    if context.session is None:  # for type-checking!
        raise RuntimeError("The API session is absent in the fake mode.")

    url = context.server.rstrip('/') + '/' + request.path.lstrip('/')
    headers = {
        'Content-Type': PATCH_CONTENT_TYPE if request.method == 'PATCH' else JSON_CONTENT_TYPE,
    }
    if context.token:
        headers['Authorization'] = f'Bearer {context.token}'

    timeout = aiohttp.ClientTimeout(
        total=settings.networking.request_timeout,
        sock_connect=settings.networking.connect_timeout,
    )

    return await context.session.request(
        method=request.method,
        url=url,
        params=dict(request.query) if request.query else None,
        data=data,
        headers=headers,
        timeout=timeout,
    )


async def interpret(
        response: aiohttp.ClientResponse,
) -> bytes:
    """
    Read the response in full, release the connection, and classify the status.
    """
    async with response:
        body = await response.read()
    return errors.check_response(body, status=response.status, reason=response.reason)
