from fastapi import APIRouter, HTTPException, Request

from realty.core.rate_limit import limiter
from realty.schemas.address import AddressLookupResponse
from realty.services.address import lookup_postal_code

router = APIRouter(prefix="/addresses", tags=["addresses"])


@router.get("/{postal_code}", response_model=AddressLookupResponse)
@limiter.limit("30/minute")
def lookup_address(request: Request, postal_code: str):
    result = lookup_postal_code(postal_code)
    if result is None:
        raise HTTPException(status_code=404, detail="Postal code not found")
    return AddressLookupResponse(
        postal_code=result.postal_code,
        street=result.street,
        neighborhood=result.neighborhood,
        city=result.city,
        state=result.state,
        complement=result.complement,
    )
