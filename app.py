#!/usr/bin/env python3
"""
DoseCare FastAPI Application
Medication adherence API for pharmacies and their clients
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from dal import database
from api.auth_routes import router as auth_router
from api.pharmacy_routes import router as pharmacy_router
from api.client_routes import router as client_router
from api.care_routes import router as care_router
from api.password_routes import router as password_router

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("🔧 Starting DoseCare initialization...")

    if database.SessionLocal is not None:
        logger.info("✅ Database already initialized")
    elif database.init_database():
        logger.info("✅ Database initialized successfully")
    else:
        logger.error("❌ Database initialization failed")

    logger.info("🚀 DoseCare API started successfully!")

    yield

    logger.info("🛑 DoseCare API shutdown complete")

# Initialize FastAPI app with lifespan
app = FastAPI(
    title="DoseCare API",
    description="Medication adherence API for pharmacies and their clients",
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(pharmacy_router)
app.include_router(client_router)
app.include_router(care_router)
app.include_router(password_router)
logger.info("✅ API routes loaded successfully")
