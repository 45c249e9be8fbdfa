import uvicorn
import os
import logging


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

APP_MODULE = os.getenv("APP_MODULE", "main:app")  # module:app
HOST = os.getenv("SERVER_HOST", "0.0.0.0")
PORT = int(os.getenv("SERVER_PORT", 8000))
RELOAD = os.getenv("RELOAD", "false").lower() in ("true", "1", "yes")


def main():
    # uvicorn installs its own SIGINT/SIGTERM handlers and drains open streams
    logger.info(f"Serving {APP_MODULE} on {HOST}:{PORT}")
    uvicorn.run(APP_MODULE, host=HOST, port=PORT, reload=RELOAD)


if __name__ == "__main__":
    main()
