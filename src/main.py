import uvicorn

from wquiz.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "wquiz.app:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
