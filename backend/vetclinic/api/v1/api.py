"""Module: api."""

from fastapi import APIRouter

# Core operational routes (health/auth).
from vetclinic.api.v1.routes.health import router as health_router
from vetclinic.api.v1.routes.auth import router as auth_router

# Clinic domain routes.
from vetclinic.api.v1.routes.owners import router as owners_router
from vetclinic.api.v1.routes.pets import router as pets_router
from vetclinic.api.v1.routes.vets import router as vets_router
from vetclinic.api.v1.routes.treatments import router as treatments_router
from vetclinic.api.v1.routes.appointments import router as appointments_router
from vetclinic.api.v1.routes.vaccines import router as vaccines_router
from vetclinic.api.v1.routes.reviews import router as reviews_router


api_router = APIRouter()

api_router.include_router(health_router, prefix="/health", tags=["health"])
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])

api_router.include_router(owners_router, prefix="/owners", tags=["owners"])
api_router.include_router(pets_router, prefix="/pets", tags=["pets"])
api_router.include_router(vets_router, prefix="/vets", tags=["vets"])
api_router.include_router(treatments_router, prefix="/treatments", tags=["treatments"])
api_router.include_router(appointments_router, prefix="/appointments", tags=["appointments"])
api_router.include_router(vaccines_router, prefix="/vaccines", tags=["vaccines"])
api_router.include_router(reviews_router, prefix="/reviews", tags=["reviews"])
