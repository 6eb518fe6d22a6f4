from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from serverfs.models.file import FileMetadata
from serverfs.services.server import Server

router = APIRouter()


class FileContent(BaseModel):
    path: str
    content: str


class CopyRequest(BaseModel):
    path: str
    new_path: str
    clobber: bool = False
    preserve_timestamps: bool = False


class MoveRequest(BaseModel):
    initial: str | list[str]
    ending: str | list[str]


class CompressRequest(BaseModel):
    files: str | list[str]
    to: str


class DecompressRequest(BaseModel):
    files: str | list[str]


def get_server(uuid: str, request: Request) -> Server:
    try:
        return request.app.state.registry.get(uuid)
    except KeyError:
        raise HTTPException(status_code=404, detail="Server not found")


@router.get("/list", response_model=list[FileMetadata])
async def list_directory(path: str = "", server: Server = Depends(get_server)):
    return await server.filesystem.directory(path)


@router.get("/stat", response_model=FileMetadata)
async def stat_path(path: str, server: Server = Depends(get_server)):
    return await server.filesystem.stat(path)


@router.get("/read")
async def read_file(
    path: str,
    tail: bool = False,
    max_bytes: int | None = None,
    server: Server = Depends(get_server),
):
    if tail:
        content = await server.filesystem.read_tail(path, max_bytes)
    else:
        content = await server.filesystem.read(path)
    return {"path": path, "content": content}


@router.post("/write")
async def write_file(file: FileContent, server: Server = Depends(get_server)):
    await server.filesystem.write(file.path, file.content)
    return {"path": file.path, "status": "written"}


@router.delete("/delete")
async def delete_path(path: str, server: Server = Depends(get_server)):
    await server.filesystem.delete(path)
    return {"path": path, "status": "deleted"}


@router.post("/copy")
async def copy_path(body: CopyRequest, server: Server = Depends(get_server)):
    await server.filesystem.copy(
        body.path,
        body.new_path,
        clobber=body.clobber,
        preserve_timestamps=body.preserve_timestamps,
    )
    return {"path": body.new_path, "status": "copied"}


@router.post("/move")
async def move_paths(body: MoveRequest, server: Server = Depends(get_server)):
    await server.filesystem.move(body.initial, body.ending)
    return {"status": "moved"}


@router.post("/compress")
async def compress_paths(body: CompressRequest, server: Server = Depends(get_server)):
    archive = await server.filesystem.compress(body.files, body.to)
    return {"archive": archive, "status": "compressed"}


@router.post("/decompress")
async def decompress_archives(body: DecompressRequest, server: Server = Depends(get_server)):
    await server.filesystem.decompress(body.files)
    return {"status": "decompressed"}
