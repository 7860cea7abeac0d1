"""
Product API routes.

Listing and lookup are public. Creating products and bulk import need an
admin caller.
"""

from fastapi import APIRouter, Depends, UploadFile, File
import structlog

from config import settings
from models.product import (
    ProductCreate,
    ProductResponse,
    ProductListResponse,
    ProductCreatedResponse
)
from models.product_import import (
    BulkImportFailure,
    BulkImportResponse,
    ImportPreviewResponse
)
from parsers.product_import_parser import parse_product_import
from services.product_service import get_product_service
from exceptions import ImportFileError
from routes.dependencies import handle_error, require_admin

logger = structlog.get_logger(__name__)

router = APIRouter()


async def _read_upload(file: UploadFile) -> bytes:
    """Read an upload, refusing anything over the configured size."""
    limit = settings.max_import_file_bytes
    content = await file.read(limit + 1)
    if len(content) > limit:
        raise ImportFileError(
            "File is too large",
            details={"max_bytes": limit}
        )
    return content


# ===================
# ROUTES
# ===================

@router.get("", response_model=ProductListResponse)
async def list_products():
    """List every product."""
    try:
        products = get_product_service().get_all()
        return ProductListResponse(data=products, total=len(products))

    except Exception as e:
        return handle_error(e)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int):
    """
    Get a single product by ID.

    Raises:
        404: Product not found
    """
    try:
        return get_product_service().get_by_id(product_id)

    except Exception as e:
        return handle_error(e)


@router.post("", response_model=ProductCreatedResponse, status_code=201)
async def create_product(
    data: ProductCreate,
    admin: str = Depends(require_admin)
):
    """Create a new product."""
    try:
        product_id = get_product_service().create(data)
        logger.info("product_created_via_api", product_id=product_id, admin=admin)
        return ProductCreatedResponse(id=product_id)

    except Exception as e:
        return handle_error(e)


@router.post("/import/preview", response_model=ImportPreviewResponse)
async def preview_import(
    file: UploadFile = File(..., description="CSV or Excel product list"),
    admin: str = Depends(require_admin)
):
    """
    Parse an import file without writing anything.

    Raises:
        422: Unsupported, empty or malformed file
    """
    logger.info(
        "product_import_preview_started",
        filename=file.filename,
        content_type=file.content_type
    )

    try:
        content = await _read_upload(file)
        result = parse_product_import(content, file.filename or "")

        return ImportPreviewResponse(
            file_name=file.filename or "",
            **result.to_dict()
        )

    except Exception as e:
        return handle_error(e)


@router.post("/import", response_model=BulkImportResponse)
async def import_products(
    file: UploadFile = File(..., description="CSV or Excel product list"),
    admin: str = Depends(require_admin)
):
    """
    Parse an import file and create every importable row.

    Rows with errors are skipped. Each remaining row is created on its own,
    so one store failure does not undo the others.

    Raises:
        422: Unsupported, empty or malformed file
    """
    logger.info(
        "product_import_started",
        filename=file.filename,
        admin=admin
    )

    try:
        content = await _read_upload(file)
        result = parse_product_import(content, file.filename or "")
        importable = result.importable

        outcome = get_product_service().bulk_create(importable)

        logger.info(
            "product_import_complete",
            filename=file.filename,
            created=len(outcome.created),
            failed=len(outcome.failed),
            skipped=result.invalid_count
        )

        return BulkImportResponse(
            file_name=file.filename or "",
            created_ids=outcome.created_ids,
            created_count=len(outcome.created),
            failed=[
                BulkImportFailure(row=row, name=name, error=error)
                for row, name, error in outcome.failed
            ],
            skipped_count=result.invalid_count,
            errors=result.to_dict()["errors"],
        )

    except Exception as e:
        return handle_error(e)
