from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load environment variables before config is imported
load_dotenv()

from app.api.v1 import router as v1_router
from app.schemas import HealthResponse
from app.utils.logging import get_logger

SERVICE_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    log = get_logger()
    log.info("BrandColor resolver starting", extra={"version": SERVICE_VERSION})
    yield
    log.info("BrandColor resolver stopping")


app = FastAPI(
    title="BrandColor Resolver",
    description="Derives primary and secondary brand colors from a domain",
    version=SERVICE_VERSION,
    lifespan=lifespan
)

# Add CORS middleware with basic configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:3001"],
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"]
)

app.include_router(v1_router)


@app.get("/healthz", response_model=HealthResponse)
def health_check():
    """Health check endpoint"""
    return HealthResponse(
        ok=True,
        version=SERVICE_VERSION,
        service="brandcolor-resolver"
    )


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "BrandColor Resolver API",
        "version": SERVICE_VERSION,
        "docs": "/docs"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
