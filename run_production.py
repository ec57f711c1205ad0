import os

import uvicorn

if __name__ == "__main__":
    # Production configuration
    uvicorn.run(
        "hostelms.main:app",
        host="0.0.0.0",  # Allow connections from any IP
        port=int(os.getenv("PORT", "8000")),
        reload=False,
        workers=1,        # Single worker for SQLite
        log_level="info",
        access_log=True
    )
