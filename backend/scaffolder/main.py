import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .core.config import settings
from .api.project_endpoints import router as project_router
from .api.server_endpoints import router as server_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)

app = FastAPI(
    title="Project Scaffolder API",
    description="Scaffolds NestJS backends and frontend projects and runs their dev servers",
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

# Include routers
app.include_router(project_router)
app.include_router(server_router)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Hello World!",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
async def health():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "scaffolder.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True
    )
