# hr_round/main.py
"""
FastAPI entry point: `uvicorn hr_round.main:app --reload`.
"""
import os
import sys
import logging
from dotenv import load_dotenv

logging.basicConfig(stream=sys.stdout, level=logging.INFO)
_log = logging.getLogger("env_loader")

# Candidate .env locations (in order)
#  - PROJECT_ROOT/.env
#  - PACKAGE_DIR/.env
#  - current working directory .env
PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))     # hr_round/
PROJECT_ROOT = os.path.dirname(PACKAGE_DIR)
CWD = os.getcwd()

cand_paths = [
    os.path.join(PROJECT_ROOT, ".env"),
    os.path.join(PACKAGE_DIR, ".env"),
    os.path.join(CWD, ".env"),
]

loaded_from = None
for p in cand_paths:
    if os.path.exists(p):
        # never override values already in the environment (tests set them first)
        load_dotenv(p, override=False)
        loaded_from = p
        _log.info("Loaded .env from: %s", p)
        break

if not loaded_from:
    load_dotenv(override=False)

_log.info("[ENV] AI_PROVIDER=%s", os.getenv("AI_PROVIDER", "gemini"))
# ---------------------------------------------------------

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hr_round import __version__
from hr_round.api import answers, auth, follow_ups, interviews, media, questions, transcribe
from hr_round.core.config import settings
from hr_round.core.logging import setup_json_logging
from hr_round.core.request_id import RequestIDMiddleware
from hr_round.db.init_db import init_db

setup_json_logging()

app = FastAPI(title="HR Round Mock Interview API", version=__version__)

app.include_router(auth.router)

# literal /hr-round/... paths before the /hr-round/{interview_id} routes
app.include_router(follow_ups.router)
app.include_router(answers.router)
app.include_router(questions.router)
app.include_router(interviews.router)

app.include_router(transcribe.router)
app.include_router(media.router)

app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

init_db()


@app.get("/health")
def health():
    return {"ok": True}
