"""
Time tracking router.
Handles timer controls, time entry management, settings, billable rates,
summaries and invoice line items.
"""

from typing import Annotated, List, Optional
from datetime import datetime
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.config import settings
from app.infrastructure.auth import get_current_user_id, require_rate_admin
from app.application.dto.time_entry_dto import (
    StartTimerRequestDTO,
    StopTimerRequestDTO,
    CreateTimeEntryRequestDTO,
    UpdateTimeEntryRequestDTO,
    MarkInvoicedRequestDTO,
    UnlinkInvoiceRequestDTO,
    TimeEntryResponseDTO,
    TimeEntryListResponseDTO,
    UnlinkInvoiceResponseDTO,
)
from app.application.dto.settings_dto import UpdateSettingsRequestDTO, SettingsResponseDTO
from app.application.dto.rate_dto import CreateRateRequestDTO, RateResponseDTO
from app.application.dto.summary_dto import (
    SummaryResponseDTO,
    LineItemsRequestDTO,
    LineItemResponseDTO,
)
from app.domain.services.billing_service import BillingService
from app.domain.services.rate_resolver import RateResolver
from app.domain.services.settings_service import SettingsService
from app.domain.services.summary_service import SummaryService
from app.domain.services.time_entry_service import TimeEntryService
from app.infrastructure.db.database import get_db
from app.infrastructure.repositories import (
    SQLAlchemyTimeEntryRepository,
    SQLAlchemyBillableRateRepository,
    SQLAlchemySettingsRepository,
    SQLAlchemyTaskRepository,
)


router = APIRouter()


def get_rate_resolver(session: Session = Depends(get_db)) -> RateResolver:
    """Dependency to get the rate resolver."""
    return RateResolver(
        SQLAlchemyBillableRateRepository(session),
        default_currency=settings.default_currency,
    )


def get_settings_service(session: Session = Depends(get_db)) -> SettingsService:
    """Dependency to get the settings store."""
    return SettingsService(SQLAlchemySettingsRepository(session))


def get_time_entry_service(
    session: Session = Depends(get_db),
    rate_resolver: RateResolver = Depends(get_rate_resolver),
    settings_service: SettingsService = Depends(get_settings_service),
) -> TimeEntryService:
    """Dependency to get the time entry lifecycle service."""
    return TimeEntryService(
        SQLAlchemyTimeEntryRepository(session),
        SQLAlchemyTaskRepository(session),
        rate_resolver,
        settings_service,
    )


def get_summary_service(session: Session = Depends(get_db)) -> SummaryService:
    """Dependency to get the summary aggregator."""
    return SummaryService(SQLAlchemyTimeEntryRepository(session), currency=settings.default_currency)


UserId = Annotated[str, Depends(get_current_user_id)]
EntryService = Annotated[TimeEntryService, Depends(get_time_entry_service)]


# Timer

@router.post("/timer/start", status_code=status.HTTP_201_CREATED, response_model=TimeEntryResponseDTO)
async def start_timer(request: StartTimerRequestDTO, user_id: UserId, service: EntryService):
    """
    Start a timer on a task.

    - **task_id**: Task to track time against; its project is derived
    - **description**: Optional work description
    - **billable**: Whether the time is billable (default true)
    - **tags**: Optional labels
    """
    entry = await service.start_timer(
        user_id,
        request.task_id,
        description=request.description,
        billable=request.billable,
        tags=request.tags,
    )
    return TimeEntryResponseDTO.from_domain(entry)


@router.post("/timer/stop", response_model=TimeEntryResponseDTO)
async def stop_timer(request: StopTimerRequestDTO, user_id: UserId, service: EntryService):
    """Stop the running timer; the end time defaults to now."""
    entry = await service.stop_timer(user_id, request.time_entry_id, request.end_time)
    return TimeEntryResponseDTO.from_domain(entry)


@router.get("/timer/current", response_model=Optional[TimeEntryResponseDTO])
async def get_current_timer(user_id: UserId, service: EntryService):
    """Get the caller's running timer, or null."""
    entry = await service.get_current_timer(user_id)
    return TimeEntryResponseDTO.from_domain(entry) if entry else None


# Entries

@router.post("/entries", status_code=status.HTTP_201_CREATED, response_model=TimeEntryResponseDTO)
async def create_time_entry(request: CreateTimeEntryRequestDTO, user_id: UserId, service: EntryService):
    """
    Record a manual time entry.

    - **task_id** / **project_id**: The task must belong to the project
    - **start_time** / **end_time**: End must be after start
    - **duration**: Optional seconds overriding the range, rounded per settings
    - **billable_rate**: Optional override; resolved from billable rates otherwise
    """
    entry = await service.create_manual_entry(
        user_id,
        task_id=request.task_id,
        project_id=request.project_id,
        start_time=request.start_time,
        end_time=request.end_time,
        description=request.description,
        duration=request.duration,
        billable=request.billable,
        billable_rate=request.billable_rate,
        tags=request.tags,
    )
    return TimeEntryResponseDTO.from_domain(entry)


@router.get("/entries", response_model=TimeEntryListResponseDTO)
async def list_time_entries(
    user_id: UserId,
    service: EntryService,
    project_id: Optional[str] = Query(None, description="Filter by project ID"),
    task_id: Optional[str] = Query(None, description="Filter by task ID"),
    start_date: Optional[datetime] = Query(None, description="Entries starting at or after"),
    end_date: Optional[datetime] = Query(None, description="Entries starting at or before"),
    billable: Optional[bool] = Query(None, description="Filter by billable status"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size, description="Items per page"),
):
    """List the caller's time entries, newest first."""
    entries, total = await service.list_time_entries(
        user_id,
        project_id=project_id,
        task_id=task_id,
        start_date=start_date,
        end_date=end_date,
        billable=billable,
        page=page,
        limit=limit,
    )
    return TimeEntryListResponseDTO(
        items=[TimeEntryResponseDTO.from_domain(entry) for entry in entries],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/entries/unbilled", response_model=List[TimeEntryResponseDTO])
async def list_unbilled_entries(
    user_id: UserId,
    service: EntryService,
    project_id: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
):
    """Billable, stopped entries not yet on an invoice."""
    entries = await service.get_unbilled_entries(user_id, project_id, start_date, end_date)
    return [TimeEntryResponseDTO.from_domain(entry) for entry in entries]


@router.post("/entries/mark-invoiced", response_model=List[TimeEntryResponseDTO])
async def mark_entries_invoiced(request: MarkInvoicedRequestDTO, user_id: UserId, service: EntryService):
    """Lock entries against an invoice. All or nothing."""
    entries = await service.mark_entries_invoiced(user_id, request.entry_ids, request.invoice_id)
    return [TimeEntryResponseDTO.from_domain(entry) for entry in entries]


@router.post("/entries/unlink-invoice", response_model=UnlinkInvoiceResponseDTO)
async def unlink_invoice(request: UnlinkInvoiceRequestDTO, user_id: UserId, service: EntryService):
    """Release the caller's entries from an invoice."""
    unlinked = await service.unlink_invoice(user_id, request.invoice_id)
    return UnlinkInvoiceResponseDTO(unlinked=unlinked)


@router.get("/entries/{entry_id}", response_model=TimeEntryResponseDTO)
async def get_time_entry(entry_id: str, user_id: UserId, service: EntryService):
    entry = await service.get_time_entry(user_id, entry_id)
    return TimeEntryResponseDTO.from_domain(entry)


@router.put("/entries/{entry_id}", response_model=TimeEntryResponseDTO)
async def update_time_entry(
    entry_id: str,
    request: UpdateTimeEntryRequestDTO,
    user_id: UserId,
    service: EntryService,
):
    """
    Update a time entry. Invoiced entries only accept description and tags.
    """
    entry = await service.update_time_entry(user_id, entry_id, request.model_dump(exclude_unset=True))
    return TimeEntryResponseDTO.from_domain(entry)


@router.delete("/entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_time_entry(entry_id: str, user_id: UserId, service: EntryService):
    """Hard delete an entry that is not invoiced."""
    await service.delete_time_entry(user_id, entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Reporting

@router.get("/summary", response_model=List[SummaryResponseDTO])
async def get_time_summary(
    user_id: UserId,
    service: Annotated[SummaryService, Depends(get_summary_service)],
    start_date: datetime = Query(..., description="Range start (inclusive)"),
    end_date: datetime = Query(..., description="Range end (inclusive)"),
    group_by: str = Query("day", description="day, week, month, project or task"),
    project_id: Optional[str] = Query(None),
    task_id: Optional[str] = Query(None),
):
    """Totals per day, week, month, project or task in ascending key order."""
    summaries = await service.get_time_summary(
        user_id, start_date, end_date, group_by, project_id=project_id, task_id=task_id
    )
    return [SummaryResponseDTO.from_domain(summary) for summary in summaries]


@router.post("/billing/line-items", response_model=List[LineItemResponseDTO])
async def create_line_items(request: LineItemsRequestDTO, user_id: UserId, service: EntryService):
    """Preview invoice line items for the caller's entries."""
    entries = [await service.get_time_entry(user_id, entry_id) for entry_id in dict.fromkeys(request.entry_ids)]
    items = BillingService().create_line_items(entries, request.group_by)
    return [LineItemResponseDTO.from_domain(item) for item in items]


# Settings

@router.get("/settings", response_model=SettingsResponseDTO)
async def get_user_settings(
    user_id: UserId,
    service: Annotated[SettingsService, Depends(get_settings_service)],
):
    """Get the caller's settings; defaults when never saved."""
    return SettingsResponseDTO.from_domain(await service.get_user_settings(user_id))


@router.put("/settings", response_model=SettingsResponseDTO)
async def update_settings(
    request: UpdateSettingsRequestDTO,
    user_id: UserId,
    service: Annotated[SettingsService, Depends(get_settings_service)],
):
    """Merge a partial update over the caller's settings."""
    updated = await service.update_user_settings(user_id, request.to_updates())
    return SettingsResponseDTO.from_domain(updated)


# Billable rates

@router.get("/rates", response_model=List[RateResponseDTO])
async def list_rates(
    _: Annotated[str, Depends(require_rate_admin)],
    resolver: Annotated[RateResolver, Depends(get_rate_resolver)],
    user_id: Optional[str] = Query(None),
    project_id: Optional[str] = Query(None),
    task_type_id: Optional[str] = Query(None),
):
    """List billable rates. Requires an admin or manager role."""
    rates = await resolver.list_rates(user_id, project_id, task_type_id)
    return [RateResponseDTO.from_domain(rate) for rate in rates]


@router.post("/rates", status_code=status.HTTP_201_CREATED, response_model=RateResponseDTO)
async def create_rate(
    request: CreateRateRequestDTO,
    _: Annotated[str, Depends(require_rate_admin)],
    resolver: Annotated[RateResolver, Depends(get_rate_resolver)],
):
    """Create a billable rate. Requires an admin or manager role."""
    rate = await resolver.create_rate(**request.model_dump())
    return RateResponseDTO.from_domain(rate)


@router.get("/rates/resolve", response_model=Optional[RateResponseDTO])
async def resolve_rate(
    user_id: UserId,
    resolver: Annotated[RateResolver, Depends(get_rate_resolver)],
    project_id: Optional[str] = Query(None),
    task_type_id: Optional[str] = Query(None),
):
    """The rate that would apply to the caller right now, or null."""
    rate = await resolver.resolve(user_id, project_id, task_type_id)
    return RateResponseDTO.from_domain(rate) if rate else None
