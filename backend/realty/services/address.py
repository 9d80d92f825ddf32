"""Postal code (CEP) lookup through ViaCEP."""

import logging
import re
from dataclasses import dataclass

import requests

from realty.core.config import get_settings
from realty.core.errors import AddressLookupError, ValidationError

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"\D")


@dataclass
class AddressLookupResult:
    postal_code: str
    street: str | None
    neighborhood: str | None
    city: str | None
    state: str | None
    complement: str | None


def normalize_postal_code(raw: str) -> str:
    digits = _NON_DIGITS.sub("", raw or "")
    if len(digits) != 8:
        raise ValidationError("Postal code must have 8 digits")
    return digits


def _blank_to_none(value: str | None) -> str | None:
    return value or None


def lookup_postal_code(raw: str, session: requests.Session | None = None) -> AddressLookupResult | None:
    """Return the address for a postal code, or None when ViaCEP does not know it."""
    postal_code = normalize_postal_code(raw)
    settings = get_settings()
    url = settings.ADDRESS_LOOKUP_URL.format(postal_code=postal_code)
    http = session or requests

    try:
        response = http.get(url, timeout=settings.ADDRESS_LOOKUP_TIMEOUT_SECONDS)
    except requests.RequestException as exc:
        logger.warning("Address lookup for %s failed: %s", postal_code, exc)
        raise AddressLookupError("Address lookup service unavailable") from exc

    # ViaCEP answers 400 for malformed codes and {"erro": true} for unknown ones.
    if response.status_code == 400:
        return None
    if not response.ok:
        logger.warning("Address lookup for %s returned HTTP %s", postal_code, response.status_code)
        raise AddressLookupError(f"Address lookup service returned HTTP {response.status_code}")

    try:
        data = response.json()
    except ValueError as exc:
        raise AddressLookupError("Address lookup service returned invalid JSON") from exc

    if not isinstance(data, dict) or data.get("erro"):
        logger.info("Postal code %s not found", postal_code)
        return None

    return AddressLookupResult(
        postal_code=data.get("cep") or postal_code,
        street=_blank_to_none(data.get("logradouro")),
        neighborhood=_blank_to_none(data.get("bairro")),
        city=_blank_to_none(data.get("localidade")),
        state=_blank_to_none(data.get("uf")),
        complement=_blank_to_none(data.get("complemento")),
    )
