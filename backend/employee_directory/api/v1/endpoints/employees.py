from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from employee_directory.core.dependencies import get_identity, get_permission_check, require_capability
from employee_directory.core.permissions import Capability, PermissionCheck, capabilities
from employee_directory.models.auth import Identity
from employee_directory.models.employee import CapabilityFlags, DirectoryView, DraftUpdate, SaveResult
from employee_directory.services.directory_store import DirectoryStore, NoSelectionError, directory_sessions
from employee_directory.services.employee_client import Err
from employee_directory.services.employee_filter import filter_employees
from employee_directory.services.export_service import ExportError, ExportFormat, export_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])


async def _session_store(identity: Identity) -> DirectoryStore:
    store, created = directory_sessions.get_or_create(identity)
    if created:
        await store.load()
    return store


def _ensure_not_saving(store: DirectoryStore) -> None:
    # a save in flight clears the selection when it finishes
    if store.saving:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Save already in progress")


def _view(store: DirectoryStore, identity: Identity, check: PermissionCheck, search: str = "") -> DirectoryView:
    state = store.state
    return DirectoryView(
        loading=state.loading,
        saving=state.saving,
        total=len(state.records),
        search=search,
        records=filter_employees(state.records, search),
        selected=state.selected,
        draft=state.draft,
        capabilities=capabilities(identity, check),
    )


@router.get("", response_model=DirectoryView)
async def list_employees(
    search: str = "",
    identity: Identity = Depends(get_identity),  # noqa: B008
    check: PermissionCheck = Depends(get_permission_check),  # noqa: B008
):
    store = await _session_store(identity)
    return _view(store, identity, check, search)


@router.post("/reload", response_model=DirectoryView)
async def reload_employees(
    identity: Identity = Depends(get_identity),  # noqa: B008
    check: PermissionCheck = Depends(get_permission_check),  # noqa: B008
):
    store, _ = directory_sessions.get_or_create(identity)
    await store.load()
    return _view(store, identity, check)


@router.delete("/session", status_code=status.HTTP_204_NO_CONTENT)
async def end_session(
    identity: Identity = Depends(get_identity),  # noqa: B008
):
    if directory_sessions.discard(identity.token):
        logger.info("Closed directory session for %s", identity.employee_tag or "anonymous")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/capabilities", response_model=CapabilityFlags)
async def get_capabilities(
    identity: Identity = Depends(get_identity),  # noqa: B008
    check: PermissionCheck = Depends(get_permission_check),  # noqa: B008
):
    return capabilities(identity, check)


@router.post("/{employee_tag}/select", response_model=DirectoryView)
async def select_employee(
    employee_tag: str,
    identity: Identity = Depends(require_capability(Capability.EDIT_RECORD)),  # noqa: B008
    check: PermissionCheck = Depends(get_permission_check),  # noqa: B008
):
    store = await _session_store(identity)
    _ensure_not_saving(store)
    employee = store.find(employee_tag)
    if not employee:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Employee with tag '{employee_tag}' not found",
        )

    store.select(employee)
    return _view(store, identity, check)


@router.patch("/draft", response_model=DirectoryView)
async def update_draft(
    body: DraftUpdate,
    identity: Identity = Depends(require_capability(Capability.EDIT_RECORD)),  # noqa: B008
    check: PermissionCheck = Depends(get_permission_check),  # noqa: B008
):
    store = await _session_store(identity)
    _ensure_not_saving(store)
    try:
        for name, value in body.model_dump(exclude_none=True).items():
            store.update_draft_field(name, value)
    except NoSelectionError as err:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(err)) from err

    return _view(store, identity, check)


@router.delete("/draft", response_model=DirectoryView)
async def close_draft(
    identity: Identity = Depends(get_identity),  # noqa: B008
    check: PermissionCheck = Depends(get_permission_check),  # noqa: B008
):
    store = await _session_store(identity)
    store.deselect()
    return _view(store, identity, check)


@router.post("/draft/save", response_model=SaveResult)
async def save_draft(
    identity: Identity = Depends(require_capability(Capability.EDIT_RECORD)),  # noqa: B008
):
    store = await _session_store(identity)
    _ensure_not_saving(store)
    result = await store.save()
    if result is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No employee selected for editing")
    if isinstance(result, Err):
        return SaveResult(saved=False, error=result.message)
    return SaveResult(saved=True)


def _export(store: DirectoryStore, fmt: ExportFormat) -> Response:
    try:
        content = export_service.render(store.records, fmt)
    except ExportError as err:
        logger.exception("Failed to export employee list as %s", fmt.value)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to export employee list",
        ) from err

    return Response(
        content=content,
        media_type=fmt.media_type,
        headers={"Content-Disposition": f'attachment; filename="{fmt.filename}"'},
    )


@router.get("/export/pdf")
async def export_pdf(
    identity: Identity = Depends(require_capability(Capability.EXPORT_PDF)),  # noqa: B008
):
    store = await _session_store(identity)
    return _export(store, ExportFormat.PDF)


@router.get("/export/xlsx")
async def export_spreadsheet(
    identity: Identity = Depends(require_capability(Capability.EXPORT_SPREADSHEET)),  # noqa: B008
):
    store = await _session_store(identity)
    return _export(store, ExportFormat.XLSX)
