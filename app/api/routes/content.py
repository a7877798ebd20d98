from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.errors import NotFoundAppError
from app.schemas.content import ContentDocument, ContentErrorResponse
from app.services.content_service import ContentService

router = APIRouter(tags=["Content"])


def get_content_service() -> ContentService:
    return ContentService(settings.app.content_dir)


@router.get(
    "/content/{slug}",
    response_model=ContentDocument,
    responses={404: {"model": ContentErrorResponse}},
)
def get_content(
    slug: str,
    service: ContentService = Depends(get_content_service),
) -> ContentDocument | JSONResponse:
    """Return an allow-listed markdown document as ``{title, body}``.

    Unknown slugs and missing files both answer 404 ``{"error": "Not found"}``
    so the response does not reveal which documents exist on disk.
    """
    try:
        return service.get_document(slug)
    except NotFoundAppError as exc:
        return JSONResponse(status_code=404, content={"error": exc.message})
