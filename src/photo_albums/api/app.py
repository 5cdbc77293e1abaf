"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Query, Request, Response, status
from fastapi.responses import FileResponse, JSONResponse
from starlette.concurrency import run_in_threadpool

from photo_albums.api.models import AlbumNameRequest, CaptionRequest
from photo_albums.api.users import router as users_router
from photo_albums.app_logging import configure_logging
from photo_albums.containers import AppContainer
from photo_albums.domain.albums import Album
from photo_albums.domain.errors import (
    AlbumError,
    ContentConflictError,
    IdentifierConflictError,
    InvalidFilenameError,
    InvalidIdentifierError,
    InvalidUserDataError,
    MediaDecodeError,
    UnknownIdentifierError,
    UnsupportedFormatError,
)
from photo_albums.domain.paths import preview_path

_STATUS_FOR_ERROR: list[tuple[type[AlbumError], int]] = [
    (InvalidIdentifierError, status.HTTP_404_NOT_FOUND),
    (InvalidFilenameError, status.HTTP_404_NOT_FOUND),
    (UnknownIdentifierError, status.HTTP_404_NOT_FOUND),
    (IdentifierConflictError, status.HTTP_409_CONFLICT),
    (ContentConflictError, status.HTTP_409_CONFLICT),
    (UnsupportedFormatError, status.HTTP_415_UNSUPPORTED_MEDIA_TYPE),
    (MediaDecodeError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (InvalidUserDataError, status.HTTP_400_BAD_REQUEST),
]


def _album_payload(album: Album) -> dict[str, object]:
    return album.model_dump(mode="json", by_alias=True)


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    app = FastAPI()
    app.state.container = container
    app.include_router(users_router)

    @app.exception_handler(AlbumError)
    async def album_error_handler(request: Request, exc: AlbumError) -> JSONResponse:
        for error_type, status_code in _STATUS_FOR_ERROR:
            if isinstance(exc, error_type):
                logger.info(
                    "%s %s rejected: %s", request.method, request.url.path, exc
                )
                return JSONResponse({"detail": str(exc)}, status_code=status_code)
        logger.error(
            "%s %s failed", request.method, request.url.path, exc_info=exc
        )
        return JSONResponse(
            {"detail": "Internal error"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/albums")
    def list_albums() -> list[dict[str, object]]:
        """Return all albums with their contents."""
        albums = container.album_repository.get_all()
        return [_album_payload(album) for album in albums]

    @app.post("/albums", status_code=status.HTTP_201_CREATED)
    def create_album(payload: AlbumNameRequest, response: Response) -> dict[str, object]:
        """Create an empty album."""
        album = container.album_repository.create(payload.name)
        response.headers["Location"] = f"/albums/{album.id}"
        logger.info("Created album %s", album.id)
        return _album_payload(album)

    @app.get("/albums/{album_id}")
    def get_album(album_id: str) -> dict[str, object]:
        """Return one album."""
        album = container.album_repository.get(album_id)
        if album is None:
            raise UnknownIdentifierError(f"Album does not exist: {album_id}")
        return _album_payload(album)

    @app.put("/albums/{album_id}", status_code=status.HTTP_204_NO_CONTENT)
    def rename_album(album_id: str, payload: AlbumNameRequest) -> None:
        """Rename an album."""
        container.content_service.rename_album(album_id, payload.name)

    @app.delete("/albums/{album_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_album(album_id: str) -> None:
        """Delete an album document and the roles granted on it."""
        container.album_repository.delete(album_id)
        container.user_service.forget_album(album_id)

    @app.put(
        "/albums/{album_id}/contents/{filename}",
        status_code=status.HTTP_201_CREATED,
    )
    async def upload_content(
        album_id: str, filename: str, request: Request, response: Response
    ) -> dict[str, object]:
        """Upload a photo or video. The request body is the raw file."""
        data = await request.body()
        content = await run_in_threadpool(
            container.content_service.add_content,
            album_id,
            filename,
            data,
            request.headers.get("content-type"),
        )
        response.headers["Location"] = f"/albums/{album_id}/contents/{filename}"
        return content.model_dump(mode="json", by_alias=True)

    @app.patch(
        "/albums/{album_id}/contents/{filename}",
        status_code=status.HTTP_204_NO_CONTENT,
    )
    def patch_content(album_id: str, filename: str, payload: CaptionRequest) -> None:
        """Update the alt text and caption of a content."""
        updated = container.content_service.update_caption(
            album_id, filename, payload.alt, payload.text
        )
        if updated is None:
            raise UnknownIdentifierError(f"Content does not exist: {filename}")

    @app.delete(
        "/albums/{album_id}/contents/{filename}",
        status_code=status.HTTP_204_NO_CONTENT,
    )
    def delete_content(album_id: str, filename: str) -> None:
        """Remove a content and its files."""
        if not container.content_service.remove_content(album_id, filename):
            raise UnknownIdentifierError(f"Content does not exist: {filename}")

    @app.get("/albums/{album_id}/contents/{filename}")
    def get_content(album_id: str, filename: str) -> FileResponse:
        """Return the original file of a content."""
        path = container.content_service.content_file(album_id, filename)
        if path is None:
            raise UnknownIdentifierError(f"Content does not exist: {filename}")
        return FileResponse(path)

    @app.get("/albums/{album_id}/contents/{filename}/thumbnail")
    def get_thumbnail(album_id: str, filename: str) -> FileResponse:
        """Return the thumbnail of a content."""
        path = container.content_service.thumbnail_file(album_id, filename)
        if path is None:
            raise UnknownIdentifierError(f"Thumbnail does not exist: {filename}")
        return FileResponse(path)

    @app.get("/albums/{album_id}/preview.png")
    def get_preview(album_id: str, generate: bool = Query(default=False)) -> FileResponse:
        """Return the album collage, composing it when missing or requested."""
        album = container.album_repository.get(album_id)
        if album is None:
            raise UnknownIdentifierError(f"Album does not exist: {album_id}")
        path = preview_path(container.settings.album_base_path, album_id)
        if generate or not path.is_file():
            path = container.preview_compositor.make_preview(album)
        return FileResponse(path, media_type="image/png")

    return app
