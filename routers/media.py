from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import FileResponse

from errors import handle_errors
from uploads import UploadStore, get_upload_store

router = APIRouter(tags=["media"])


@router.post("/api/uploads", status_code=201)
async def upload_media(file: UploadFile = File(...), uploads: UploadStore = Depends(get_upload_store)):
    with handle_errors("Failed to upload file"):
        url = await uploads.save(file)
        return {"url": url, "name": file.filename}


@router.get("/uploads/{name}")
async def get_media(name: str, uploads: UploadStore = Depends(get_upload_store)):
    path = uploads.path_for(name)
    if path is None:
        raise HTTPException(status_code=404, detail="Not found")
    return FileResponse(path)
