#!/usr/bin/env python3
"""
URL Data Extractor - API Launcher
Clean startup with proper path handling for the src/ directory structure
"""
import sys
from pathlib import Path

# Get project root directory
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT / 'src'))


def main():
    """Main entry point"""
    try:
        # Import after path is set
        from config import validate_config
        import config
        import uvicorn
        from api.main import create_app
        from utils.logger import get_logger

        print("\n" + "="*80)
        print("URL DATA EXTRACTOR API")
        print("="*80)
        print(f"Project Root: {PROJECT_ROOT}")
        print("="*80 + "\n")

        validate_config()
        print("[OK] Configuration validated")

        logger = get_logger(log_level=config.LOG_LEVEL)
        logger.info("Starting URL Data Extractor API", component="Main")

        app = create_app(logger=logger)
        logger.info(
            f"REST API running on http://{config.API_HOST}:{config.API_PORT} (Swagger: /docs)",
            component="Main",
        )
        uvicorn.run(app, host=config.API_HOST, port=config.API_PORT, log_level="info")

    except Exception as e:
        print(f"\n[FAIL] Failed to start API: {str(e)}")
        if 'logger' in locals():
            logger.critical(f"API startup failed: {str(e)}", component="Main", exc_info=True)
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\n[STOP] API stopped by user")
        sys.exit(0)
