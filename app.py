"""
docassets FastAPI Application

A REST API server for documents with embedded image assets.
Provides endpoints for uploading images, creating, updating and deleting
documents, inspecting storage health and running cleanup sweeps.
"""

import os
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

from docassets.config import Config
from docassets.models import Document, StorageStats, SweepResult
from docassets.services.document_service import DocumentService
from docassets.utils.exceptions import NotFoundError, UploadTooLargeError, ValidationError
from docassets.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


# Pydantic models for API
class UploadResponse(BaseModel):
    """Response model for an image upload."""

    success: bool = True
    filename: str
    url: str


class DocumentRequest(BaseModel):
    """Request model for creating or updating a document."""

    title: str = Field(default="", description="Document title")
    content: str = Field(default="", description="Rich-text content with image references")


class DocumentResponse(BaseModel):
    """Response model wrapping a single document."""

    success: bool = True
    document: Document


class DocumentListResponse(BaseModel):
    """Response model for listing documents."""

    documents: list[Document]


class DeleteDocumentResponse(BaseModel):
    """Response model for document deletion."""

    success: bool = True
    id: str
    deleted_assets: list[str]
    failed_assets: dict[str, str]


class MaintenanceResponse(BaseModel):
    """Response model for manually triggered sweeps."""

    results: list[SweepResult]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service_initialized: bool
    document_backend: str
    background_workers: bool


def create_app(config: Config | None = None, service: DocumentService | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Configuration (loaded from DOCASSETS_CONFIG YAML and environment when omitted)
        service: Pre-built service (built from config when omitted)

    Returns:
        FastAPI application
    """
    config = config or (
        service.config
        if service
        else Config.from_env_or_yaml(os.getenv("DOCASSETS_CONFIG", "config.yaml"))
    )
    state: dict[str, Any] = {"service": service}

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for startup/shutdown."""
        configure_logging(config.logging)

        logger.info("Starting docassets server")
        logger.info(
            f"Configuration: uploads={config.storage.upload_root}, "
            f"documents={config.document_backend}, "
            f"staging TTL={config.gc.staging_ttl_seconds}s"
        )

        if state["service"] is None:
            state["service"] = DocumentService.from_config(config)
        await state["service"].initialize()
        logger.info("docassets service initialized")

        yield

        logger.info("Shutting down docassets server")
        await state["service"].close()
        logger.info("Cleanup complete")

    app = FastAPI(
        title="docassets API",
        description="Documents with reference-counted image assets",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def get_service() -> DocumentService:
        if state["service"] is None:
            raise HTTPException(status_code=503, detail="Service not initialized")
        return state["service"]

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        current = state["service"]
        return HealthResponse(
            status="healthy" if current else "initializing",
            service_initialized=current is not None,
            document_backend=config.document_backend,
            background_workers=bool(current and current.gc.running),
        )

    # Upload endpoint
    @app.post("/api/upload-image", response_model=UploadResponse)
    async def upload_image(image: UploadFile = File(...)):
        """
        Upload an image into the staging area.

        The returned URL is embedded by the editor. The image becomes durable
        when a document referencing it is saved; otherwise it is reaped after
        the staging TTL.
        """
        service = get_service()

        try:
            # Read one byte past the limit so oversized uploads are detected without buffering them
            data = await image.read(config.upload.max_upload_bytes + 1)
            asset = await service.stage_upload(data, image.filename or "", image.content_type)
            return UploadResponse(filename=asset.id, url=asset.url)
        except UploadTooLargeError as e:
            raise HTTPException(status_code=413, detail=e.message) from e
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=e.message) from e
        except Exception as e:
            logger.error(f"Error uploading image: {e}")
            raise HTTPException(status_code=500, detail=str(e)) from e
        finally:
            await image.close()

    # Document endpoints
    @app.post("/api/documents", response_model=DocumentResponse)
    async def create_document(request: DocumentRequest):
        """
        Create a document.

        Every staged image the content references is moved to durable storage
        and its references are rewritten to the durable URL.
        """
        service = get_service()

        try:
            document = await service.create_document(request.title, request.content)
            return DocumentResponse(document=document)
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=e.message) from e
        except Exception as e:
            logger.error(f"Error creating document: {e}")
            raise HTTPException(status_code=500, detail=str(e)) from e

    @app.get("/api/documents", response_model=DocumentListResponse)
    async def list_documents():
        """List documents in creation order."""
        service = get_service()
        return DocumentListResponse(documents=await service.list_documents())

    @app.get("/api/documents/{document_id}", response_model=DocumentResponse)
    async def get_document(document_id: str):
        """Retrieve a specific document by ID."""
        service = get_service()

        try:
            return DocumentResponse(document=await service.get_document(document_id))
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=e.message) from e

    @app.put("/api/documents/{document_id}", response_model=DocumentResponse)
    async def update_document(document_id: str, request: DocumentRequest):
        """
        Update a document.

        Newly referenced images are promoted; images no longer referenced
        are deleted once the document is saved.
        """
        service = get_service()

        try:
            document = await service.update_document(document_id, request.title, request.content)
            return DocumentResponse(document=document)
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=e.message) from e
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=e.message) from e
        except Exception as e:
            logger.error(f"Error updating document: {e}")
            raise HTTPException(status_code=500, detail=str(e)) from e

    @app.delete("/api/documents/{document_id}", response_model=DeleteDocumentResponse)
    async def delete_document(document_id: str):
        """Delete a document together with every image it owns."""
        service = get_service()

        try:
            result = await service.delete_document(document_id)
            return DeleteDocumentResponse(
                id=document_id,
                deleted_assets=result.deleted,
                failed_assets=result.failed,
            )
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=e.message) from e
        except Exception as e:
            logger.error(f"Error deleting document: {e}")
            raise HTTPException(status_code=500, detail=str(e)) from e

    # Statistics endpoint
    @app.get("/api/cleanup-stats", response_model=StorageStats)
    async def get_stats():
        """
        Get storage statistics.

        Returns staged and durable file counts, durable files no document
        references, the number of documents and of referenced assets.
        """
        service = get_service()

        try:
            return await service.get_stats()
        except Exception as e:
            logger.error(f"Error getting stats: {e}")
            raise HTTPException(status_code=500, detail=str(e)) from e

    # Maintenance endpoints
    @app.post("/api/maintenance/{sweep}", response_model=MaintenanceResponse)
    async def run_sweep(sweep: str):
        """
        Run a cleanup sweep immediately.

        `sweep` is one of: reap-staging, sweep-orphans, resync-references, run-all.
        """
        gc = get_service().gc
        sweeps = {
            "reap-staging": gc.reap_staging,
            "sweep-orphans": gc.sweep_orphans,
            "resync-references": gc.resync_references,
        }

        if sweep == "run-all":
            return MaintenanceResponse(results=await gc.run_all())
        if sweep not in sweeps:
            raise HTTPException(status_code=404, detail=f"Unknown sweep: {sweep}")
        return MaintenanceResponse(results=[await sweeps[sweep]()])

    # Root endpoint
    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": "docassets API",
            "version": "1.0.0",
            "description": "Documents with reference-counted image assets",
            "docs": "/docs",
            "health": "/health",
        }

    # Static assets, mounted last so API routes take precedence
    app.mount(
        config.storage.staging_url_prefix,
        StaticFiles(directory=config.storage.staging_dir, check_dir=False),
        name="staging",
    )
    app.mount(
        config.storage.durable_url_prefix,
        StaticFiles(directory=config.storage.durable_dir, check_dir=False),
        name="durable",
    )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app:app", host="0.0.0.0", port=3001, reload=True, log_level="info")
