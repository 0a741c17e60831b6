import uvicorn
import multiprocessing
from app.core.config import settings

if __name__ == "__main__":
    # One worker with reload in development, CPU-scaled workers otherwise
    development = settings.environment == "development"
    workers = 1 if development else max(1, multiprocessing.cpu_count() * 2)
    print(f"Using {workers} workers")

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        workers=None if development else workers,
        reload=development,
        log_level=settings.effective_log_level,
    )
