from datetime import datetime, timezone
from fastapi import FastAPI
from library_app.core.config import logger
from library_app.core.database import Base, engine
from library_app.api import routes

logger.info("Creating database tables (if not present)...")
Base.metadata.create_all(bind=engine)
app = FastAPI(title="Library Circulation System")
app.include_router(routes.router)

@app.get("/health")
def health():
    return {"status": "ok", "time": datetime.now(timezone.utc).isoformat()}
