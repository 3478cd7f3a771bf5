import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import LOG_LEVEL
from routers import upload_router, data_router

# Import DB init function
from database import Base, engine
from models.upload_db_model import UploadDB
from models.analysis_db_model import AnalysisDB

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

def create_db():
    Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Excel Analytics Backend",
    description="Upload spreadsheets and CSV files, then project stored tables into 2D and 3D chart series.",
    version="0.1.0",
)

# Run create_db() once when app starts
@app.on_event("startup")
def on_startup():
    logger.info("Initializing database...")
    create_db()
    logger.info("Database initialized.")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(upload_router.router)
app.include_router(data_router.router)

@app.get("/")
async def root():
    return {"message": "Excel Analytics API is running"}
