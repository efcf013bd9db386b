from dotenv import load_dotenv
from fastapi import FastAPI

from sentinelle.api.exports import router as exports_router
from sentinelle.core.config import get_settings


# =========================================================
# CARGA DE ENTORNO
# =========================================================

load_dotenv()


# =========================================================
# FASTAPI APP (ENTRYPOINT ASGI)
# =========================================================

settings = get_settings()

app = FastAPI(title=settings.app_name, version=settings.app_version)

app.include_router(exports_router)


@app.get("/health")
def health():
    """Estado del servicio (sin dependencias externas)."""
    return {
        "status": "ok",
        "environment": settings.environment,
        "legal_explainer_backend": settings.legal_explainer_backend,
    }
