import logging
import os
import subprocess
from datetime import datetime

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wc26 import config
from wc26.routes import combinations, round_of_32
from wc26.services.combination_table import CombinationTable, get_combination_table, table_coverage

logging.getLogger("wc26").setLevel(config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title=config.APP_NAME)


# Get build info
def get_build_info():
    """Get git commit hash or build timestamp"""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=os.path.dirname(os.path.dirname(__file__)),
            capture_output=True,
            text=True,
            timeout=2,
        )
        if result.returncode == 0:
            return result.stdout.strip()
    except (OSError, subprocess.SubprocessError):
        pass

    # Fallback to build timestamp
    return datetime.now().strftime("%Y%m%d-%H%M%S")


BUILD_HASH = get_build_info()

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(round_of_32.router, prefix="/api", tags=["round-of-32"])
app.include_router(combinations.router, prefix="/api", tags=["combinations"])


@app.on_event("startup")
def on_startup():
    # Load the table once up front so a bad data file shows in the startup log
    coverage = table_coverage(get_combination_table())
    logger.info(
        "Combination table: %d/%d combinations populated (source=%s); build %s",
        coverage["populated"], coverage["total"], coverage["source"], BUILD_HASH,
    )
    if coverage["missing"]:
        logger.warning(
            "%d combinations missing from the table will use priority rules",
            coverage["missing"],
        )


@app.get("/api/health")
def health_check(table: CombinationTable = Depends(get_combination_table)):
    """Diagnostic endpoint to verify which code is running"""
    return {
        "app_name": config.APP_NAME,
        "build_hash": BUILD_HASH,
        "status": "healthy",
        "combination_table_entries": len(table),
    }


@app.get("/")
def root():
    return {"message": config.APP_NAME, "status": "ok"}
