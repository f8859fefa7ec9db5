"""Generator API routes: random credentials and strength reports.

Both endpoints are pure: nothing is stored. A client that wants to keep a
generated credential passes the returned value to POST /api/vault/items.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from ..core import EventSeverity, EventType, log_security_event
from ..vault import ConfigurationError, CredentialGenerator, StrengthScorer
from .security import verify_session_token

router = APIRouter(prefix="/api/generator", tags=["generator"])

_generator = CredentialGenerator()


# ── Pydantic Models ──────────────────────────────────────────────────


class GenerateRequest(BaseModel):
    length: int = Field(16, ge=1, le=256)
    use_upper: bool = True
    use_lower: bool = True
    use_digits: bool = True
    use_symbols: bool = True
    exclude_ambiguous: bool = True


class StrengthRequest(BaseModel):
    credential: str


# ── Routes ───────────────────────────────────────────────────────────


@router.post("/generate")
async def generate_credential(
    body: GenerateRequest,
    _token: str = Depends(verify_session_token),
):
    """Generate a credential and score it in one call."""
    try:
        credential = _generator.generate(
            length=body.length,
            use_upper=body.use_upper,
            use_lower=body.use_lower,
            use_digits=body.use_digits,
            use_symbols=body.use_symbols,
            exclude_ambiguous=body.exclude_ambiguous,
        )
    except ConfigurationError as e:
        log_security_event(
            EventType.VAULT_ERROR,
            EventSeverity.INVESTIGATE,
            f"Credential generation rejected: {e}",
            details={"length": body.length},
        )
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    report = StrengthScorer.score(credential)
    log_security_event(
        EventType.CREDENTIAL_GENERATED,
        EventSeverity.INFO,
        "Credential generated",
        details={"length": len(credential), "category": report.category.value},
    )
    return {"credential": credential, "strength": report.to_dict()}


@router.post("/strength")
async def score_credential(
    body: StrengthRequest,
    _token: str = Depends(verify_session_token),
):
    """Score a credential without storing or logging it."""
    return StrengthScorer.score(body.credential).to_dict()
