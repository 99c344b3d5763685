from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from timecapsule.api.enrichment import router as enrichment_router
from timecapsule.core.middleware import bearer_auth_middleware
from dotenv import load_dotenv
from datetime import datetime, timezone
import logging
import signal
import sys


load_dotenv()
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

app = FastAPI(title="Time Capsule AI Service")

# Called from arbitrary front-end origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)
app.middleware("http")(bearer_auth_middleware)
app.include_router(enrichment_router, prefix="/api", tags=["enrichment"])

@app.get("/")
async def root():
    return {"message": "Time Capsule AI service is running"}

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


if __name__ == "__main__":
    def signal_handler(signum, frame):
        """Handle shutdown signals."""
        logging.info(f"Received signal {signum}, shutting down...")
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    import uvicorn
    try:
        uvicorn.run(app, host="0.0.0.0", port=8001)
    except KeyboardInterrupt:
        logging.info("FastAPI server interrupted")
    finally:
        logging.info("Server shutdown complete")
