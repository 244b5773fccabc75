"""
Admin panel routes

Every view except login is wrapped by the Session Guard (require_admin_session).
Admin data reads and writes are forwarded to the backend with the visitor's
credentials; a 401 from the backend sends the visitor to the login view.
"""
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel

from storefront.api.deps import (
    TOKEN_COOKIE,
    get_admin_credentials,
    require_admin_session,
)
from storefront.config.settings import get_settings
from storefront.services.backend_client import (
    AdminAuthRequired,
    BackendAPIError,
    BackendClient,
)
from storefront.services.service_factory import get_backend_client
from storefront.services.session_guard import SessionGuard

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

# view name -> title
ADMIN_VIEWS: Dict[str, str] = {
    "dashboard": "Dashboard",
    "products": "Product Manager",
    "enquiries": "Enquiry Manager",
    "activity": "Activity Page Manager",
    "about": "About Manager",
    "settings": "Settings",
    "chatbot": "Chatbot Trainer",
    "gallery": "Gallery Manager",
    "home": "Home Page Manager",
}

# resource name -> backend path
ADMIN_RESOURCES: Dict[str, str] = {
    "products": "/products",
    "categories": "/categories",
    "enquiries": "/enquiries",
    "events": "/events",
    "activities": "/activities",
    "gallery": "/gallery",
    "news": "/news",
    "admins": "/admin/list",
    "chat-logs": "/chat-trainer/logs",
    "knowledge": "/chat-trainer/knowledge",
    "settings": "/settings",
}


@dataclass(frozen=True)
class WriteTarget:
    """Backend path of an admin resource and the writes it accepts"""
    path: str
    collection: Tuple[str, ...] = ()  # methods on {path}
    item: Tuple[str, ...] = ()  # methods on {path}/{item}
    create_path: Optional[str] = None  # POST goes here instead of {path}


# resource name -> write target
ADMIN_WRITES: Dict[str, WriteTarget] = {
    "products": WriteTarget("/products", collection=("POST",), item=("PUT", "DELETE")),
    "categories": WriteTarget("/categories", collection=("POST",), item=("PUT", "DELETE")),
    "enquiries": WriteTarget("/enquiries", item=("DELETE",)),
    "events": WriteTarget("/events", collection=("POST",), item=("PUT", "DELETE")),
    "activities": WriteTarget("/activities", collection=("POST",), item=("PUT", "DELETE")),
    "gallery": WriteTarget("/gallery", collection=("POST",), item=("DELETE",)),
    "news": WriteTarget("/news", collection=("POST",), item=("DELETE",)),
    "admins": WriteTarget(
        "/admin",
        collection=("POST",),
        item=("PATCH", "DELETE"),
        create_path="/admin/register"
    ),
    "knowledge": WriteTarget("/chat-trainer/knowledge", collection=("POST",), item=("DELETE",)),
    "settings": WriteTarget("/settings", collection=("PUT",)),
    "page-content": WriteTarget("/page-content", item=("PUT",)),
}

# item id, optionally followed by a sub-action ("<id>/toggle", "<id>/photo")
ITEM_PATH_PATTERN = re.compile(r'^[A-Za-z0-9_-]+(?:/[A-Za-z0-9_-]+)?$')


class LoginRequest(BaseModel):
    """Login form"""
    email: str
    password: str


@router.get("/login")
async def login_view():
    """Public login view"""
    return {"view": "login", "title": "Admin Panel"}


@router.post("/login")
async def login(
    req: LoginRequest,
    response: Response,
    backend: BackendClient = Depends(get_backend_client)
):
    """
    Forward the login to the backend

    The returned token is kept in an HTTP-only cookie and sent along with
    every later admin request.
    """
    try:
        data = await backend.login(req.email, req.password)
    except BackendAPIError as e:
        logger.info(f"Admin login rejected for {req.email}: {e}")
        raise HTTPException(status_code=401, detail="Invalid credentials or server error.")
    except ValueError:
        raise HTTPException(status_code=502, detail="Invalid response from server.")

    token = data.get("token") if isinstance(data, dict) else None
    if not token:
        raise HTTPException(status_code=502, detail="Invalid response from server.")

    response.set_cookie(TOKEN_COOKIE, token, httponly=True, samesite="lax")
    logger.info(f"Admin {req.email} logged in")
    return {"status": "ok", "redirect": get_settings().ADMIN_HOME_PATH}


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    backend: BackendClient = Depends(get_backend_client)
):
    credentials = get_admin_credentials(request)
    try:
        await backend.logout(credentials)
    except BackendAPIError as e:
        logger.warning(f"Backend logout failed: {e}")

    response.delete_cookie(TOKEN_COOKIE)
    return {"status": "ok", "redirect": get_settings().LOGIN_PATH}


@router.get("/data/{resource}")
async def admin_data(
    resource: str,
    request: Request,
    guard: SessionGuard = Depends(require_admin_session),
    backend: BackendClient = Depends(get_backend_client)
) -> Any:
    """Read admin data; AdminAuthRequired propagates to the redirect handler"""
    path = ADMIN_RESOURCES.get(resource)
    if path is None:
        raise HTTPException(status_code=404, detail=f"Unknown resource: {resource}")

    try:
        return await backend.get_admin_resource(path, get_admin_credentials(request))
    except AdminAuthRequired:
        raise
    except BackendAPIError as e:
        raise HTTPException(status_code=502, detail=e.detail)


async def _read_payload(request: Request) -> Any:
    """JSON request body, None when empty"""
    if not await request.body():
        return None
    try:
        return await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body must be JSON")


async def _forward_write(
    request: Request,
    backend: BackendClient,
    path: str
) -> Dict[str, Any]:
    payload = await _read_payload(request)
    try:
        data = await backend.send_admin_write(
            request.method, path, get_admin_credentials(request), payload
        )
    except AdminAuthRequired:
        raise
    except BackendAPIError as e:
        # client errors (validation, not found) are passed through
        status = e.status_code if e.status_code and 400 <= e.status_code < 500 else 502
        raise HTTPException(status_code=status, detail=e.detail)
    except ValueError:
        raise HTTPException(status_code=502, detail="Invalid response from server.")

    logger.info(f"Admin {request.method} {path}")
    return {"status": "ok", "data": data}


@router.api_route("/data/{resource}", methods=["POST", "PUT"])
async def admin_write(
    resource: str,
    request: Request,
    guard: SessionGuard = Depends(require_admin_session),
    backend: BackendClient = Depends(get_backend_client)
):
    """Create (POST) or replace (PUT) on a resource collection"""
    target = ADMIN_WRITES.get(resource)
    if target is None:
        raise HTTPException(status_code=404, detail=f"Unknown resource: {resource}")
    if request.method not in target.collection:
        raise HTTPException(status_code=405, detail=f"{request.method} not allowed on {resource}")

    path = target.path
    if request.method == "POST" and target.create_path:
        path = target.create_path
    return await _forward_write(request, backend, path)


@router.api_route("/data/{resource}/{item_path:path}", methods=["PUT", "PATCH", "DELETE"])
async def admin_item_write(
    resource: str,
    item_path: str,
    request: Request,
    guard: SessionGuard = Depends(require_admin_session),
    backend: BackendClient = Depends(get_backend_client)
):
    """Update or delete one item, e.g. DELETE /admin/data/products/<id>"""
    target = ADMIN_WRITES.get(resource)
    if target is None:
        raise HTTPException(status_code=404, detail=f"Unknown resource: {resource}")
    if request.method not in target.item:
        raise HTTPException(status_code=405, detail=f"{request.method} not allowed on {resource} items")
    if not ITEM_PATH_PATTERN.match(item_path):
        raise HTTPException(status_code=400, detail=f"Invalid item path: {item_path}")

    return await _forward_write(request, backend, f"{target.path}/{item_path}")


@router.get("/{view}")
async def admin_view(
    view: str,
    guard: SessionGuard = Depends(require_admin_session)
):
    """Protected admin view"""
    title = ADMIN_VIEWS.get(view)
    if title is None:
        raise HTTPException(status_code=404, detail=f"Unknown admin view: {view}")

    return guard.render(lambda: {
        "view": view,
        "title": title,
        "admin": guard.identity,
    })
