from pydantic import BaseModel


class AddressLookupResponse(BaseModel):
    postal_code: str
    street: str | None
    neighborhood: str | None
    city: str | None
    state: str | None
    complement: str | None
