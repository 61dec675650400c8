# catalog_dashboard/api/upload_image.py
"""
Server-side image upload endpoint.

Takes the raw image bytes as the request body, stores them in the product
image bucket and answers with the public URL. Run with:

    uvicorn api.upload_image:app --port 8000
"""
import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException, Request
from starlette.concurrency import run_in_threadpool

from connectors.base import BackendError
from connectors.factory import create_backend
from services.errors import UploadError
from services.storage_service import upload_product_image
from utils.config_loader import SETTINGS_FILE, read_config

logger = logging.getLogger(__name__)

app = FastAPI(title="Catalog Image Upload API")


@lru_cache(maxsize=1)
def get_config():
    return read_config(SETTINGS_FILE)


@lru_cache(maxsize=1)
def get_backend():
    config = get_config()
    if "error" in config:
        raise RuntimeError(config["error"])
    return create_backend(config)


def get_max_bytes():
    config = get_config()
    return int(config.get("catalog", {}).get("max_image_mb", 5) * 1024 * 1024)


@app.post("/api/upload-image", status_code=200)
async def upload_image(request: Request, backend=Depends(get_backend), max_bytes: int = Depends(get_max_bytes)):
    data = await request.body()
    content_type = request.headers.get("content-type", "image/png")
    filename = request.headers.get("x-filename") or "upload.png"

    try:
        # storage clients are blocking
        url = await run_in_threadpool(upload_product_image, backend, data, filename, content_type, max_bytes)
    except UploadError as e:
        # storage failures are wrapped in UploadError too
        if isinstance(e.__cause__, BackendError):
            logger.error(f"Storage error while uploading '{filename}': {e}")
            raise HTTPException(status_code=500, detail=str(e))
        logger.warning(f"Rejected upload '{filename}': {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except BackendError as e:
        logger.error(f"Storage error while uploading '{filename}': {e}")
        raise HTTPException(status_code=500, detail=str(e))

    logger.info(f"Uploaded image '{filename}' -> {url}")
    return {"url": url}
