import base64
import ssl
from typing import Optional, Union

import aiohttp

from kubecall._cogs.helpers import versions
from kubecall._cogs.structs import credentials


class APIContext:
    """
    A container for an aiohttp session and the connection info for URL building.

    The container is constructed once per client and is then shared by all
    the client's calls, including the concurrent ones. Nothing in it is
    modified by the calls; the session itself is safe for concurrent use
    within one event loop.

    In the fake mode, no session is created at all: there is no network
    to talk to, so there are no network resources to allocate and release.
    """

    # The main contained object used by the API methods.
    session: Optional[aiohttp.ClientSession]

    # Contextual information for URL building & authentication.
    server: str
    token: Optional[str]
    default_namespace: Optional[str]
    fake: bool

    def __init__(
            self,
            info: credentials.ConnectionInfo,
            *,
            ssl_context: Optional[ssl.SSLContext] = None,
            fake: bool = False,
    ) -> None:
        super().__init__()
        self.server = info.server
        self.token = info.token
        self.default_namespace = info.default_namespace
        self.fake = fake
        self.session = None if fake else self.make_aiohttp_session(ssl_context)

    def make_aiohttp_session(self, ssl_context: Optional[ssl.SSLContext]) -> aiohttp.ClientSession:
        # It is a good practice to self-identify a bit.
        headers = {'User-Agent': f'kubecall/{versions.version or "unknown"}'}
        return aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(
                limit=0,
                ssl=ssl_context if ssl_context is not None else True,
            ),
            headers=headers,
        )

    async def close(self) -> None:
        if self.session is not None:
            await self.session.close()


def make_ssl_context(info: credentials.ConnectionInfo) -> ssl.SSLContext:
    """
    Build the SSL context for the server verification: TLS 1.2+, the given CAs only.

    A broken CA bundle is a login failure: the client cannot be constructed
    partially, with the server verification silently degraded.
    """
    try:
        cadata = decode_to_pem(info.ca_data) if info.ca_data is not None else None
        if cadata is not None and not cadata.strip():
            raise ValueError("The certificate data are empty.")
        context = ssl.create_default_context(
            purpose=ssl.Purpose.SERVER_AUTH,
            cafile=info.ca_path,
            cadata=cadata,
        )
    except (ssl.SSLError, OSError, ValueError) as e:
        raise credentials.LoginError(f"Cannot load the certificate authority: {e}") from e
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    return context


def decode_to_pem(data: Union[str, bytes]) -> str:
    # PEM bundles can have comments or blank lines before the first certificate.
    if isinstance(data, str) and '-----BEGIN ' in data:
        return data
    elif isinstance(data, bytes) and b'-----BEGIN ' in data:
        return data.decode('ascii')
    else:
        return base64.b64decode(data).decode('ascii')
