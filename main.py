"""
===========================================
SBK LADDER MANAGER - MAIN API
===========================================
Ladder tracker: projection of the stake path + WIN/LOSS progress
"""

import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sbk_ladder import __version__, config
from sbk_ladder.router import router as ladder_router
from sbk_ladder.service import get_ladder_service

# Cargar variables de entorno
load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("LadderAPI")


# ===========================================
# FASTAPI APP
# ===========================================
app = FastAPI(
    title="SBK Ladder Manager",
    description="Projects and tracks compounding betting ladders",
    version=__version__
)

# Habilitar CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(ladder_router)


@app.on_event("startup")
async def startup_event():
    """Open the configured store and restore the first ladder as selection"""
    service = get_ladder_service()
    logger.info(f"Storage backend: {config.STORAGE_BACKEND} | selected: {service.selected_ladder_id}")


@app.on_event("shutdown")
async def shutdown_event():
    get_ladder_service().close()


@app.get("/api/health")
async def health_check():
    """Health check para monitoreo"""
    return {
        "status": "online",
        "service": "SBK Ladder Manager",
        "version": __version__,
        "storage": config.STORAGE_BACKEND
    }


# ===========================================
# EJECUCIÓN LOCAL
# ===========================================
if __name__ == "__main__":
    import os
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run("main:app", host="0.0.0.0", port=port, reload=True)
