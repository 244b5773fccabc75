"""
SD Herbs REST backend client

Wraps the backend calls the web tier needs:
1. Admin identity probe / login / logout
2. Product catalogue (offline chat answers)
3. Site settings (logo)
4. Voice proxy (text-to-speech fallback)
5. Admin data writes and public enquiries
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

WRITE_METHODS = ("POST", "PUT", "PATCH", "DELETE")


class BackendAPIError(Exception):
    """Non-2xx answer (or no answer) from the REST backend"""

    def __init__(self, status_code: Optional[int], detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Backend API Error {status_code}: {detail}")


class AdminAuthRequired(BackendAPIError):
    """The backend rejected the admin credentials (401)"""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(401, detail)


@dataclass
class AdminCredentials:
    """What the browser sent that identifies an admin"""
    token: Optional[str] = None
    cookies: Dict[str, str] = field(default_factory=dict)

    def headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}


class BackendClient:
    """Async client for the REST backend"""

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        identity_path: str = "/admin/me",
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Args:
            base_url: Backend API root, e.g. https://host/api
            timeout: Per-request timeout (seconds)
            identity_path: Path of the "current admin" endpoint
            transport: Custom httpx transport (tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.identity_path = identity_path
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport
        )

    async def _request(
        self,
        method: str,
        path: str,
        credentials: Optional[AdminCredentials] = None,
        **kwargs
    ) -> httpx.Response:
        """
        Send one request and map failures to BackendAPIError

        401 becomes AdminAuthRequired so the HTTP layer can send the visitor
        to the login view.
        """
        headers = kwargs.pop("headers", {})
        cookies = None
        if credentials is not None:
            headers.update(credentials.headers())
            cookies = credentials.cookies or None

        try:
            if cookies:
                headers["Cookie"] = "; ".join(f"{k}={v}" for k, v in cookies.items())
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"Backend {method} {path} failed: {e}")
            raise BackendAPIError(None, str(e))

        if response.status_code == 401:
            raise AdminAuthRequired()
        if not response.is_success:
            detail = response.text[:200]
            logger.warning(f"Backend {method} {path} -> {response.status_code}: {detail}")
            raise BackendAPIError(response.status_code, detail)

        return response

    async def get_admin_identity(self, credentials: AdminCredentials) -> Dict[str, Any]:
        """
        Identity probe

        Success is decided by status alone; the body is returned when it is a
        JSON object, otherwise an empty dict.
        """
        response = await self._request("GET", self.identity_path, credentials=credentials)
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """POST /admin/login; the body carries the session token"""
        response = await self._request(
            "POST", "/admin/login", json={"email": email, "password": password}
        )
        return response.json()

    async def logout(self, credentials: AdminCredentials) -> None:
        await self._request("POST", "/admin/logout", credentials=credentials)

    async def get_admin_resource(self, path: str, credentials: AdminCredentials) -> Any:
        """Authenticated GET of admin data (enquiries, admin list, ...)"""
        response = await self._request("GET", path, credentials=credentials)
        return response.json()

    async def send_admin_write(
        self,
        method: str,
        path: str,
        credentials: AdminCredentials,
        payload: Any = None
    ) -> Any:
        """
        Authenticated POST/PUT/PATCH/DELETE of admin data

        Returns:
            The decoded JSON body, or None when the backend sent no body
        """
        if method not in WRITE_METHODS:
            raise ValueError(f"Not a write method: {method}")

        kwargs = {} if payload is None else {"json": payload}
        response = await self._request(method, path, credentials=credentials, **kwargs)
        if not response.content:
            return None
        return response.json()

    async def submit_enquiry(self, enquiry: Dict[str, Any]) -> None:
        """Public enquiry form (contact page, product enquiry)"""
        await self._request("POST", "/enquiries", json=enquiry)

    async def list_products(self) -> List[Dict[str, Any]]:
        response = await self._request("GET", "/products")
        data = response.json()
        return data if isinstance(data, list) else []

    async def get_site_settings(self) -> Dict[str, Any]:
        response = await self._request("GET", "/settings")
        data = response.json()
        return data if isinstance(data, dict) else {}

    async def speak(self, text: str) -> bytes:
        """Backend text-to-speech proxy; returns audio/mpeg bytes"""
        response = await self._request("POST", "/voice/speak", json={"text": text})
        return response.content

    async def aclose(self) -> None:
        await self._client.aclose()
