"""httpx adapters for the remote API: transport, authentication and contact endpoints."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

import httpx

from circle.application.dto import (
    ChangePasswordRequest,
    ContactRequest,
    LoginRequest,
    RegisterRequest,
    TransferFormat,
)
from circle.domain import (
    AuthError,
    AuthorizationError,
    Contact,
    NotFoundError,
    PageRequest,
    PageResponse,
    SessionExpired,
    TransientError,
    User,
    ValidationError,
)
from circle.infrastructure.schemas import (
    AuthPayload,
    ContactPageSchema,
    ContactRequestSchema,
    ContactSchema,
    Envelope,
    UserSchema,
    WireModel,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080/api"
DEFAULT_TIMEOUT = 10.0

SchemaT = TypeVar("SchemaT", bound=WireModel)


def _error_details(response: httpx.Response) -> tuple[str, dict[str, str]]:
    """Best-effort (message, field_errors) from an error response body."""
    message = response.reason_phrase or f"HTTP {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return message, {}
    if not isinstance(body, dict):
        return message, {}
    detail = body.get("message") or body.get("detail")
    if isinstance(detail, str) and detail:
        message = detail
    elif detail:
        message = str(detail)
    errors = body.get("errors")
    if not isinstance(errors, dict):
        errors = {}
    return message, {str(k): str(v) for k, v in errors.items()}


def parse(schema: type[SchemaT], data: Any, what: str) -> SchemaT:
    """Validate response data against a wire schema; malformed data is a server fault."""
    try:
        return schema.model_validate(data)
    except ValueError as exc:
        raise TransientError(None, f"Malformed {what} in server response: {exc}") from exc


class ApiTransport:
    """One httpx.AsyncClient plus bearer auth, envelope unwrapping and error classification.

    token_provider is read on every authenticated call. When the server rejects
    that token (401/403), on_unauthorized is called and SessionExpired raised.
    Nothing is retried here.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        token_provider: Callable[[], str | None] = lambda: None,
        on_unauthorized: Callable[[], None] = lambda: None,
        timeout: float | None = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._token_provider = token_provider
        self._on_unauthorized = on_unauthorized
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> ApiTransport:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def send(
        self,
        method: str,
        path: str,
        *,
        authenticated: bool = True,
        params: dict[str, Any] | None = None,
        json: Any = None,
        files: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Perform one request. Returns the response for 2xx, raises a classified error otherwise."""
        headers: dict[str, str] = {}
        token = None
        if authenticated:
            token = self._token_provider()
            if not token:
                raise SessionExpired(None, "Not authenticated.")
            headers["Authorization"] = f"Bearer {token}"
        try:
            response = await self._client.request(
                method, path, params=params, json=json, files=files, headers=headers
            )
        except httpx.TimeoutException as exc:
            raise TransientError(None, f"{method} {path} timed out.") from exc
        except httpx.TransportError as exc:
            raise TransientError(None, f"{method} {path} failed: {exc}") from exc
        if response.status_code >= 400:
            raise self._classify(response, token)
        return response

    def _classify(self, response: httpx.Response, token: str | None) -> Exception:
        status = response.status_code
        message, field_errors = _error_details(response)
        logger.debug("%s %s -> %d %s", response.request.method, response.request.url, status, message)
        if status in (401, 403):
            if token is None:
                return AuthorizationError(status, message)
            # A newer login may have replaced the token while this call was in flight.
            if self._token_provider() == token:
                self._on_unauthorized()
            return SessionExpired(status, message)
        if status == 404:
            return NotFoundError(status, message)
        if status >= 500:
            return TransientError(status, message)
        return ValidationError(message, field_errors, status=status)

    async def call(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send and unwrap the {success, message, data} envelope. Returns data."""
        response = await self.send(method, path, **kwargs)
        if not response.content:
            return None
        try:
            envelope = Envelope.model_validate(response.json())
        except ValueError as exc:
            raise TransientError(
                response.status_code, f"Malformed response envelope from {method} {path}."
            ) from exc
        if not envelope.success:
            raise ValidationError(
                envelope.message or "Request was not successful.",
                envelope.errors,
                status=response.status_code,
            )
        return envelope.data


def _auth_result(data: Any) -> tuple[str, User]:
    payload = parse(AuthPayload, data, "authentication payload")
    return payload.token, payload.user.to_domain()


class AuthClient:
    """Implements AuthGateway over /auth endpoints."""

    def __init__(self, transport: ApiTransport) -> None:
        self._transport = transport

    async def login(self, credentials: LoginRequest) -> tuple[str, User]:
        body = {"username": credentials.username, "password": credentials.password}
        try:
            data = await self._transport.call("POST", "/auth/login", json=body, authenticated=False)
        except (AuthorizationError, ValidationError, NotFoundError) as exc:
            raise AuthError(AuthError.INVALID_CREDENTIALS, exc.message) from exc
        return _auth_result(data)

    async def register(self, profile: RegisterRequest) -> tuple[str, User]:
        body = {
            "firstName": profile.first_name,
            "lastName": profile.last_name,
            "password": profile.password,
        }
        if profile.email:
            body["email"] = profile.email
        if profile.phone_number:
            body["phoneNumber"] = profile.phone_number
        try:
            data = await self._transport.call(
                "POST", "/auth/register", json=body, authenticated=False
            )
        except ValidationError as exc:
            duplicate = exc.status == 409 or "already" in exc.message.lower()
            reason = AuthError.DUPLICATE_IDENTITY if duplicate else AuthError.INVALID_PROFILE
            raise AuthError(reason, exc.message) from exc
        return _auth_result(data)

    async def current_user(self) -> User:
        data = await self._transport.call("GET", "/auth/me")
        return parse(UserSchema, data, "user").to_domain()

    async def change_password(self, request: ChangePasswordRequest) -> None:
        body = {
            "currentPassword": request.current_password,
            "newPassword": request.new_password,
        }
        await self._transport.call("PUT", "/auth/change-password", json=body)


class DirectoryClient:
    """Implements ContactGateway and ContactFileGateway over /contacts endpoints. Stateless."""

    def __init__(self, transport: ApiTransport) -> None:
        self._transport = transport

    def _page(self, data: Any, request: PageRequest) -> PageResponse[Contact]:
        schema = parse(ContactPageSchema, data, "contact page")
        try:
            page = schema.to_domain()
        except ValueError as exc:
            raise TransientError(None, f"Inconsistent contact page: {exc}") from exc
        if page.number != request.page:
            raise TransientError(
                None, f"Server returned page {page.number} for requested page {request.page}."
            )
        return page

    async def list(self, page: PageRequest) -> PageResponse[Contact]:
        data = await self._transport.call("GET", "/contacts", params=page.to_params())
        return self._page(data, page)

    async def search(self, query: str, page: PageRequest) -> PageResponse[Contact]:
        params = {"query": query, **page.to_params()}
        data = await self._transport.call("GET", "/contacts/search", params=params)
        return self._page(data, page)

    async def get_by_id(self, contact_id: int) -> Contact:
        data = await self._transport.call("GET", f"/contacts/{contact_id}")
        return parse(ContactSchema, data, "contact").to_domain()

    async def create(self, request: ContactRequest) -> Contact:
        body = ContactRequestSchema.from_request(request).to_wire()
        data = await self._transport.call("POST", "/contacts", json=body)
        return parse(ContactSchema, data, "contact").to_domain()

    async def update(self, contact_id: int, request: ContactRequest) -> Contact:
        body = ContactRequestSchema.from_request(request).to_wire()
        data = await self._transport.call("PUT", f"/contacts/{contact_id}", json=body)
        return parse(ContactSchema, data, "contact").to_domain()

    async def delete(self, contact_id: int) -> None:
        await self._transport.call("DELETE", f"/contacts/{contact_id}")

    # --- batch files ---

    async def submit_file(
        self, kind: TransferFormat, data: bytes, filename: str
    ) -> list[Contact]:
        kind = TransferFormat(kind)
        files = {"file": (filename, data, kind.media_type)}
        result = await self._transport.call("POST", f"/contacts/import/{kind.value}", files=files)
        if not isinstance(result, list):
            raise TransientError(None, "Import response did not contain a contact list.")
        return [parse(ContactSchema, item, "contact").to_domain() for item in result]

    async def import_json(self, data: bytes, filename: str = "contacts.json") -> list[Contact]:
        return await self.submit_file(TransferFormat.JSON, data, filename)

    async def import_csv(self, data: bytes, filename: str = "contacts.csv") -> list[Contact]:
        return await self.submit_file(TransferFormat.CSV, data, filename)

    async def request_export(self, kind: TransferFormat) -> bytes:
        kind = TransferFormat(kind)
        response = await self._transport.send("GET", f"/contacts/export/{kind.value}")
        return response.content

    async def export_json(self) -> bytes:
        return await self.request_export(TransferFormat.JSON)

    async def export_csv(self) -> bytes:
        return await self.request_export(TransferFormat.CSV)
