import logging
from functools import lru_cache

from google.cloud import secretmanager

logger = logging.getLogger('uvicorn.error')


@lru_cache(maxsize=None)
def get_secret(secret_name: str) -> str:
    """Reads a secret version payload; cached for the life of the process."""
    client = secretmanager.SecretManagerServiceClient()
    response = client.access_secret_version(request={"name": secret_name})
    logger.info(f"Loaded secret {secret_name.rsplit('/versions/', 1)[0]}")
    return response.payload.data.decode("UTF-8")
