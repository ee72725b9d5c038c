from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from storefront.health.service import providers_health_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root():
    return {"ok": True}

@router.get("/providers")
def health_providers(request: Request):
    return JSONResponse(providers_health_info(request))
