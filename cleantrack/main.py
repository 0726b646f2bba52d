from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from cleantrack.core.config import settings
from cleantrack.core.firebase_init import initialize_firebase, get_firebase_status

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize Firebase first
logger.info("🔥 Initializing Firebase for FastAPI app...")
if not get_firebase_status()['available']:
    if initialize_firebase():
        logger.info("✅ Firebase initialized successfully")
    else:
        logger.warning("⚠️ Firebase initialization failed - app will run without Firebase features")

app = FastAPI(
    title="CleanTrack API",
    description="Cleaning and fill tracking for vending machine service routes",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def safe_include_router(router_module_path: str, router_name: str = "router"):
    """Safely include a router with error handling"""
    try:
        module = __import__(router_module_path, fromlist=[router_name])
        router = getattr(module, router_name)
        app.include_router(router)
        logger.info(f"✅ Successfully included {router_module_path}")
        return True
    except Exception as e:
        logger.exception(f"❌ Failed to include {router_module_path}: {str(e)}")
        return False

# Include routers with error handling
logger.info("Loading routers...")

routers_to_load = [
    ("cleantrack.routers.auth", "Authentication"),
    ("cleantrack.routers.reports", "Reports"),
    ("cleantrack.routers.users", "Users"),
    ("cleantrack.routers.commodities", "Commodities"),
    ("cleantrack.routers.photos", "Photos"),
    ("cleantrack.routers.navigation", "Navigation"),
]

successful_routers = []
failed_routers = []

for router_path, router_description in routers_to_load:
    if safe_include_router(router_path):
        successful_routers.append(router_description)
    else:
        failed_routers.append(router_description)

logger.info(f"Successfully loaded routers: {successful_routers}")
if failed_routers:
    logger.warning(f"Failed to load routers: {failed_routers}")

@app.get("/")
async def root():
    return {
        "message": "Welcome to the CleanTrack API",
        "firebase_status": get_firebase_status(),
        "loaded_routers": successful_routers,
        "failed_routers": failed_routers
    }

@app.get("/health")
async def health_check():
    firebase_status = get_firebase_status()
    return {
        "status": "healthy",
        "firebase_available": firebase_status['available'],
        "loaded_routers": len(successful_routers),
        "failed_routers": len(failed_routers)
    }
