import os
import logging

import uvicorn
from dotenv import load_dotenv

load_dotenv()

# Configure logging with environment variable control and validation
log_level = os.getenv("LOG_LEVEL", "INFO").upper()

valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
if log_level not in valid_levels:
    print(f"Warning: Invalid LOG_LEVEL '{log_level}'. Using INFO instead.")
    print(f"Valid levels: {', '.join(valid_levels)}")
    log_level = 'INFO'

logging.basicConfig(
    level=getattr(logging, log_level),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logging.info("Session service starting")
logging.info(f"Log level: {log_level}")

if log_level == 'DEBUG':
    logging.info("DEBUG logging enabled - session lifecycle tracing active")

if __name__ == "__main__":
    port = int(os.getenv("PORT", 5000))
    if os.getenv("MODE") == "dev":
        logging.info("Running in development mode with auto-reload")
        logging.info(f"Tip: check service health via `curl http://127.0.0.1:{port}/status`")
        uvicorn.run("service:create_app", factory=True, reload=True, log_level="info", port=port)
    else:
        logging.info("Running in production mode")
        from service import create_app
        uvicorn.run(create_app(), host="0.0.0.0", port=port)
