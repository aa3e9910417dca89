from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from typing import Optional

from app.core.roles import SURFACES, can_edit
from app.core.session import SessionContext
from app.dependencies.auth import get_current_session, require_editor
from app.schemas.approvals import DecisionSchema
from app.services.backend_api import BackendAPIClient, BackendAPIError
from app.services.domains import DECLINED, DomainConfig, get_domain
from app.services.list_controller import ListController
from app.services.list_view import SortDirection, SortSpec, describe_sort


# =====================================================
# DEPENDENCIES
# =====================================================

def get_backend_client(
    session: SessionContext = Depends(get_current_session)
) -> BackendAPIClient:
    return BackendAPIClient(token=session.token)


def get_domain_or_404(domain: str) -> DomainConfig:
    config = get_domain(domain)
    if config is None:
        raise HTTPException(status_code=404, detail=f"Unknown list: {domain}")
    return config


def _backend_failure(e: BackendAPIError) -> HTTPException:
    if e.status_code == 404:
        return HTTPException(status_code=404, detail=e.message)
    return HTTPException(status_code=502, detail=e.message)


def _page_payload(controller: ListController, request: Request, session: SessionContext) -> dict:
    result = controller.render()
    return {
        "domain": controller.domain.name,
        "rows": result.rows,
        "page": controller.page_number,
        "page_size": controller.page_size,
        "total_pages": result.total_pages,
        "total_items": result.total_items,
        "sort": describe_sort(controller.sort),
        "can_edit": can_edit(session.role, request.url.path),
    }


def _refetched_page(controller: ListController, request: Request, session: SessionContext, surface: str):
    if controller.error:
        list_url = request.url.replace(path=f"/{surface}/{controller.domain.name}", query="")
        return JSONResponse(
            status_code=502,
            content={"detail": controller.error, "retry": str(list_url)}
        )
    return _page_payload(controller, request, session)


# =====================================================
# ROUTES
# =====================================================

def build_router(surface: str) -> APIRouter:
    router = APIRouter(prefix=f"/{surface}", tags=[f"{surface.upper()} Lists"])

    @router.get("/{domain}")
    def list_records(
        request: Request,
        config: DomainConfig = Depends(get_domain_or_404),
        search: str = "",
        sort: Optional[str] = None,
        direction: Optional[str] = None,
        page: int = Query(1),
        page_size: Optional[int] = None,
        session: SessionContext = Depends(get_current_session),
        client: BackendAPIClient = Depends(get_backend_client)
    ):
        controller = ListController(config, client, page_size=page_size)

        controller.load()

        if controller.error:
            return JSONResponse(
                status_code=502,
                content={"detail": controller.error, "retry": str(request.url)}
            )

        for field in config.filter_fields:
            controller.set_filter(field, request.query_params.get(field))
        controller.search(search)
        if sort:
            controller.set_sort(SortSpec(sort, SortDirection.parse(direction)))
        controller.go_to(page)

        return _page_payload(controller, request, session)

    @router.get("/{domain}/{record_id}")
    def get_record(
        record_id: str,
        config: DomainConfig = Depends(get_domain_or_404),
        client: BackendAPIClient = Depends(get_backend_client)
    ):
        endpoint = config.detail_url(record_id)
        if endpoint is None:
            raise HTTPException(status_code=404, detail=f"{config.label} have no detail view")

        try:
            return client.get_record(endpoint, config.envelope_keys)
        except BackendAPIError as e:
            raise _backend_failure(e)

    @router.delete("/{domain}/{record_id}")
    def delete_record(
        request: Request,
        record_id: str,
        config: DomainConfig = Depends(get_domain_or_404),
        session: SessionContext = Depends(require_editor),
        client: BackendAPIClient = Depends(get_backend_client)
    ):
        if config.delete_url(record_id) is None:
            raise HTTPException(status_code=405, detail=f"{config.label} cannot be deleted")

        controller = ListController(config, client)
        try:
            controller.delete(record_id)
        except BackendAPIError as e:
            raise _backend_failure(e)

        return _refetched_page(controller, request, session, surface)

    @router.post("/{domain}/{record_id}/decision")
    def decide_change(
        request: Request,
        record_id: str,
        data: DecisionSchema,
        config: DomainConfig = Depends(get_domain_or_404),
        session: SessionContext = Depends(require_editor),
        client: BackendAPIClient = Depends(get_backend_client)
    ):
        if config.approval is None:
            raise HTTPException(status_code=405, detail=f"{config.label} have no approval workflow")

        reason = (data.reason or "").strip() or None
        if data.action == DECLINED and reason is None:
            raise HTTPException(status_code=422, detail="A reason is required to decline a change")

        controller = ListController(config, client)
        try:
            controller.decide(record_id, data.action, reason)
        except BackendAPIError as e:
            raise _backend_failure(e)

        return _refetched_page(controller, request, session, surface)

    return router


routers = [build_router(surface) for surface in SURFACES]
