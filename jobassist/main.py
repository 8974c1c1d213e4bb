# jobassist/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobassist.api.v1.cv import router as cv_router
from jobassist.api.v1.interviews import router as interviews_router
from jobassist.api.v1.mock_tests import router as mock_tests_router
from jobassist.api.v1.uploads import router as uploads_router
from jobassist.api.v1.users import router as users_router
from jobassist.core.config import settings
from jobassist.core.errors import envelope, register_exception_handlers
from jobassist.core.logger import setup_logging
from jobassist.db.session import check_db_connection, init_db

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Job Assist API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# user and upload routes keep their root paths
app.include_router(users_router)
app.include_router(uploads_router)
app.include_router(cv_router, prefix="/api/cv")
app.include_router(interviews_router, prefix="/api/interviews")
app.include_router(mock_tests_router, prefix="/api/tests")


@app.get("/health")
async def health():
    return envelope("ok", {"env": settings.APP_ENV, "llmAdapter": settings.LLM_ADAPTER})


@app.on_event("startup")
async def startup_event():
    if check_db_connection():
        init_db()
    else:
        logger.warning("Database unavailable at startup; tables not created")
