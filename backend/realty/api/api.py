from fastapi import APIRouter

from realty.api.routes import addresses, properties, visits

api_router = APIRouter()
api_router.include_router(properties.router)
api_router.include_router(visits.router)
api_router.include_router(addresses.router)
