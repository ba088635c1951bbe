import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI, HTTPException

from .config import RaceConfig, ServerConfig
from .duration import parse_duration
from .errors import CombinedFailure, DeadlineExceeded, InvalidIdentifier, InvalidTimeout
from .execution import race


@asynccontextmanager
async def lifespan(app: FastAPI):
    global http_client
    logger.info("fastest-request service starting up...")
    if http_client is None:
        http_client = httpx.AsyncClient(follow_redirects=True)
    try:
        yield
    finally:
        if http_client is not None:
            await http_client.aclose()
            http_client = None
        logger.info("fastest-request service shut down.")


app = FastAPI(title="Fastest Request", lifespan=lifespan)
http_client = None
race_config = RaceConfig()
logger = logging.getLogger("fastest_request")


@app.get("/v1/lookup/{identifier}")
async def lookup(identifier: str, timeout: Optional[str] = None):
    """Race every provider for ``identifier`` and return the first answer as ``{url, data}``."""
    raw_timeout = timeout or race_config.default_timeout
    try:
        seconds = parse_duration(raw_timeout)
    except InvalidTimeout as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    try:
        response = await race(identifier, seconds, client=http_client, config=race_config)
    except InvalidIdentifier as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except DeadlineExceeded as exc:
        logger.warning("Lookup for '%s' timed out after %s", identifier, raw_timeout)
        raise HTTPException(status_code=504, detail=str(exc))
    except CombinedFailure as exc:
        logger.warning("All providers failed for '%s': %d errors", identifier, len(exc.errors))
        raise HTTPException(
            status_code=502,
            detail={"message": "all providers failed", "errors": [str(e) for e in exc.errors]},
        )
    return response.as_dict()


@app.get("/health", status_code=200)
async def health_check():
    return {"status": "ok", "providers": len(race_config.provider_urls)}


def serve() -> None:
    server_config = ServerConfig()
    logging.basicConfig(level=server_config.log_level.upper(), format="%(asctime)s %(levelname)s %(message)s")
    uvicorn.run(app, host=server_config.host, port=server_config.port)


if __name__ == "__main__":
    serve()
