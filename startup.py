import logging
import os
import sys
import traceback

import uvicorn

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)

# Add the src directory to Python path
current_dir = os.path.dirname(os.path.abspath(__file__))
src_path = os.path.join(current_dir, 'src')
sys.path.insert(0, src_path)

print("=" * 60, flush=True)
print("Clinic-Rx Backend Startup", flush=True)
print("=" * 60, flush=True)
logger.info(f"Python version: {sys.version.split()[0]}")

# Log critical environment variables (without exposing secrets)
logger.info("Environment Configuration:")
logger.info(f"  PORT: {os.environ.get('PORT', '8000')}")
logger.info(f"  APP_ENV: {os.environ.get('APP_ENV', 'not set')}")
logger.info(f"  MONGO_URI: {'set' if os.environ.get('MONGO_URI') else 'not set'}")
logger.info(f"  MONGO_DB_NAME: {os.environ.get('MONGO_DB_NAME', 'not set')}")
logger.info(f"  SECURITY_API_KEYS: {'set' if os.environ.get('SECURITY_API_KEYS') else 'not set'}")
logger.info(f"  TEMPLATE_STORE_PATH: {os.environ.get('TEMPLATE_STORE_PATH', 'default')}")

if __name__ == "__main__":
    try:
        from clinicrx.core.config import get_settings

        try:
            settings = get_settings()
        except ValueError as ve:
            logger.error(f"Configuration validation failed: {ve}")
            logger.error(traceback.format_exc())
            logger.error("Common configuration issues:")
            logger.error("  1. MONGO_URI must start with mongodb:// or mongodb+srv://")
            logger.error("  2. RENDER_CANVAS_WIDTH/HEIGHT must be between 1 and 4000")
            sys.exit(1)

        port = int(os.environ.get("PORT", settings.port))
        host = os.environ.get("HOST", settings.host)

        logger.info("Step 1: Importing clinicrx.app...")
        try:
            from clinicrx.app import app  # noqa: F401
        except Exception as import_error:
            logger.error(f"Failed to import clinicrx.app: {import_error}")
            logger.error(traceback.format_exc())
            sys.exit(1)

        logger.info(f"Step 2: Starting uvicorn server on {host}:{port}...")
        uvicorn.run(
            "clinicrx.app:app",
            host=host,
            port=port,
            workers=1,
            log_level="info",
            access_log=True,
            timeout_keep_alive=75,
            timeout_graceful_shutdown=30,
        )
    except KeyboardInterrupt:
        logger.info("Shutting down due to keyboard interrupt")
        sys.exit(0)
    except Exception as e:
        logger.error(f"CRITICAL: Failed to start application: {type(e).__name__}: {e}")
        logger.error(traceback.format_exc())
        sys.exit(1)
