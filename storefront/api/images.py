"""Menu image upload endpoints"""

from fastapi import APIRouter, Depends, File, Query, UploadFile

from storefront.api.auth import require_admin
from storefront.api.deps import get_image_storage
from storefront.models.user import User
from storefront.services.images import ImageStorage

router = APIRouter()


@router.post("", status_code=201)
async def upload_image(
    file: UploadFile = File(...),
    admin: User = Depends(require_admin),
    images: ImageStorage = Depends(get_image_storage),
):
    """Store an image and return its public URL"""
    data = await file.read()
    url = await images.upload(file.filename, file.content_type, data)
    return {"url": url}


@router.delete("", status_code=204)
async def delete_image(
    url: str = Query(..., min_length=1),
    admin: User = Depends(require_admin),
    images: ImageStorage = Depends(get_image_storage),
):
    await images.delete(url)
