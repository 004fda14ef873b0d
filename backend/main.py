import logging
import os
import sys

# ── Exclude local virtualenvs from uvicorn --reload watcher ──
if "--reload" in sys.argv or os.environ.get("UVICORN_RELOAD"):
    os.environ.setdefault("WATCHFILES_IGNORE_DIRS", ".venv,venv,__pycache__,node_modules")

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import ApiConfig

api_config = ApiConfig()

logging.basicConfig(
    level=api_config.log_level,
    format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
)

# -------- ROUTERS --------
from routers.verify_routes import router as verify_router

app = FastAPI(
    title="ID Verify Backend",
    description="Identity document field extraction and selfie quality checks",
    version="1.0.0",
)

# -------- CORS --------
app.add_middleware(
    CORSMiddleware,
    allow_origins=api_config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -------- REGISTER ROUTERS --------
app.include_router(verify_router)


# -------- ROOT HEALTH CHECK --------

@app.get("/")
def root():
    return {
        "status": "running",
        "service": "ID Verify Backend"
    }
