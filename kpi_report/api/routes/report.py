import logging
from typing import Final

from fastapi import APIRouter, File, HTTPException, UploadFile, status

from kpi_report.api.deps import AssemblerDep, LayoutClientDep
from kpi_report.core.config import settings
from kpi_report.schemas.layout import DocumentLayout
from kpi_report.schemas.report import (
    CodesResponse,
    MaskRequest,
    MaskResponse,
    ReportExtractionResponse,
    ReportExtractionResult,
)
from kpi_report.services.pipelines.report import ReportExtractionPipeline
from kpi_report.services.rules.chart_assembler import NoChartsDetectedError
from kpi_report.services.rules.pseudonymize import build_pseudonym_map, mask_ranking, unmasked_ranking

router = APIRouter(prefix="/report", tags=["report"])

logger = logging.getLogger(__name__)
ALLOWED_CONTENT_TYPES: Final[set[str]] = {
    "application/pdf",
    "application/x-pdf",
}


def _response(template_name: str, result: ReportExtractionResult) -> ReportExtractionResponse:
    message = "ok" if not result.warnings else f"ok with {len(result.warnings)} warning(s)"
    return ReportExtractionResponse(
        success=True,
        template_name=template_name,
        message=message,
        **result.model_dump(),
    )


@router.get("/codes", summary="List known base codes", response_model=CodesResponse)
async def list_codes(assembler: AssemblerDep) -> CodesResponse:
    return CodesResponse(codes=sorted(assembler.template.registry.known_codes))


@router.post(
    "/extract",
    summary="Extract KPI rankings from a report PDF",
    response_model=ReportExtractionResponse,
)
async def extract_report(
    layout_client: LayoutClientDep,
    assembler: AssemblerDep,
    file: UploadFile = File(..., description="Network KPI report PDF"),
) -> ReportExtractionResponse:
    """Run layout extraction and chart assembly on an uploaded report."""

    content_type = (file.content_type or "").lower()
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=f"Unsupported file type: {file.content_type}",
        )

    try:
        payload = await file.read()
    except Exception as exc:  # pragma: no cover - upload IO errors are rare
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to read uploaded file.",
        ) from exc

    if not payload:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is empty.",
        )
    if len(payload) > settings.max_upload_mb * 1024 * 1024:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Uploaded file exceeds {settings.max_upload_mb} MB.",
        )

    pipeline = ReportExtractionPipeline(layout_client=layout_client, assembler=assembler)
    try:
        result = await pipeline.run(
            payload,
            filename=file.filename,
            content_type=file.content_type,
        )
    except NoChartsDetectedError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(exc), "template": assembler.template.name},
        ) from exc
    except Exception as exc:  # pragma: no cover - passthrough for layout failures
        logger.exception("Report extraction failed")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Report layout extraction failed.",
        ) from exc

    return _response(assembler.template.name, result)


@router.post(
    "/parse",
    summary="Extract KPI rankings from an already extracted page layout",
    response_model=ReportExtractionResponse,
)
async def parse_layout(layout: DocumentLayout, assembler: AssemblerDep) -> ReportExtractionResponse:
    try:
        result = assembler.assemble(layout)
    except NoChartsDetectedError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(exc), "template": assembler.template.name},
        ) from exc
    return _response(assembler.template.name, result)


@router.post("/mask", summary="Pseudonymize a ranking", response_model=MaskResponse)
async def mask(request: MaskRequest) -> MaskResponse:
    subject = request.subject.strip().upper()
    if not request.hide_others:
        return MaskResponse(subject=subject, ranking=unmasked_ranking(request.ranking))

    mapping = build_pseudonym_map(request.ranking, subject, prefix=settings.alias_prefix)
    return MaskResponse(
        subject=subject,
        ranking=mask_ranking(request.ranking, mapping, subject, prefix=settings.alias_prefix),
    )
