# Vault API - RESTful endpoints for credential management
#
# API endpoints for vault operations:
# - List/search, read, create, update, delete vault items
# - All operations are scoped to the owner resolved by get_current_owner
# - Create/update echo the submitted plaintext secret back to the caller

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import AliasChoices, BaseModel, Field

from ..vault import (
    AuthError,
    DecryptionError,
    EncryptionError,
    NotFoundError,
    ValidationError,
    VaultError,
    VaultItem,
    VaultStore,
)
from .security import get_current_owner

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/vault", tags=["vault"])


def get_vault_store(request: Request) -> VaultStore:
    """Return the store built at startup (see api.main lifespan)."""
    store = getattr(request.app.state, "vault_store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Vault store not initialized"
        )
    return store


def _http_error(exc: VaultError) -> HTTPException:
    """Translate a vault error into the response the caller may see."""
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, AuthError):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, (EncryptionError, DecryptionError)):
        # Cipher detail stays in the server log
        logger.error("Vault cipher failure: %s", exc)
    else:
        logger.error("Unexpected vault error: %s", exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error"
    )


# Request/Response Models
class VaultItemRequest(BaseModel):
    # Blank, null or missing required fields are reported by VaultStore as 400
    title: Optional[str] = None
    username: Optional[str] = None
    secret: Optional[str] = Field(None, validation_alias=AliasChoices("secret", "password"))
    url: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None


class VaultItemResponse(BaseModel):
    id: str
    owner_id: str
    title: str
    username: str
    secret: str
    url: str
    notes: str
    tags: List[str]
    created_at: str
    updated_at: str

    @classmethod
    def from_item(cls, item: VaultItem) -> "VaultItemResponse":
        return cls(**item.to_dict())


# Endpoints

@router.get("/items", response_model=List[VaultItemResponse])
async def list_items(
    search: Optional[str] = None,
    owner_id: str = Depends(get_current_owner),
    store: VaultStore = Depends(get_vault_store),
):
    """
    List the caller's vault items, newest first, secrets decrypted.

    ``search`` filters case-insensitively on title, username, url and tags.
    """
    try:
        items = store.list_items(owner_id, search=search)
    except VaultError as e:
        raise _http_error(e)
    return [VaultItemResponse.from_item(item) for item in items]


@router.get("/items/{item_id}", response_model=VaultItemResponse)
async def get_item(
    item_id: str,
    owner_id: str = Depends(get_current_owner),
    store: VaultStore = Depends(get_vault_store),
):
    """Get one of the caller's items with its secret decrypted."""
    try:
        item = store.get_item(owner_id, item_id)
    except VaultError as e:
        raise _http_error(e)
    return VaultItemResponse.from_item(item)


@router.post("/items", response_model=VaultItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(
    request: VaultItemRequest,
    owner_id: str = Depends(get_current_owner),
    store: VaultStore = Depends(get_vault_store),
):
    """
    Add a new item to the caller's vault.

    The secret is encrypted before storage; the response echoes the
    submitted plaintext.
    """
    try:
        item = store.create_item(
            owner_id,
            title=request.title,
            username=request.username,
            secret=request.secret,
            url=request.url,
            notes=request.notes,
            tags=request.tags,
        )
    except VaultError as e:
        raise _http_error(e)
    return VaultItemResponse.from_item(item)


@router.put("/items/{item_id}", response_model=VaultItemResponse)
async def update_item(
    item_id: str,
    request: VaultItemRequest,
    owner_id: str = Depends(get_current_owner),
    store: VaultStore = Depends(get_vault_store),
):
    """
    Replace one of the caller's items.

    Unknown ids and ids owned by someone else both return 404.
    """
    try:
        item = store.update_item(
            owner_id,
            item_id,
            title=request.title,
            username=request.username,
            secret=request.secret,
            url=request.url,
            notes=request.notes,
            tags=request.tags,
        )
    except VaultError as e:
        raise _http_error(e)
    return VaultItemResponse.from_item(item)


@router.delete("/items/{item_id}")
async def delete_item(
    item_id: str,
    owner_id: str = Depends(get_current_owner),
    store: VaultStore = Depends(get_vault_store),
):
    """Delete one of the caller's items."""
    try:
        store.delete_item(owner_id, item_id)
    except VaultError as e:
        raise _http_error(e)
    return {"message": "Vault item deleted successfully"}
