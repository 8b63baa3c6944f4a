# api/v1/router.py
from fastapi import APIRouter

from . import analyze, plans, mascot

api_router = APIRouter()

api_router.include_router(analyze.router, tags=["Analysis"])
api_router.include_router(plans.router, tags=["Synthesis"])
api_router.include_router(mascot.router, tags=["Mascot"])
