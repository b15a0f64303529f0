import os
from fastapi import APIRouter

from medlookup.core.config import settings

router = APIRouter(tags=["meta"])


@router.get("/version")
def version():
    return {
        "version": settings.APP_VERSION,
        "build": settings.BUILD_ID,
        "git_commit": os.environ.get("GIT_COMMIT"),
    }
