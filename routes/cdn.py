import os

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from file_utils import avatars_folder

router = APIRouter(prefix="/cdn", tags=["cdn"])

@router.get("/avatars/{filename}")
def serve_avatar(filename: str):
    """Serve avatar files"""
    if os.path.basename(filename) != filename:
        raise HTTPException(status_code=404, detail="File not found")
    file_path = os.path.join(avatars_folder(), filename)

    if not os.path.exists(file_path):
        raise HTTPException(status_code=404, detail="File not found")

    return FileResponse(file_path, media_type="image/jpeg", headers={"Cache-Control": "public, max-age=86400"})
