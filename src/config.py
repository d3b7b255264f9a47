"""
Configuration module for the URL Data Extractor
Environment-agnostic: Works locally, in Docker, and on Google Cloud
Loads environment variables and validates configuration
"""
import os
import tempfile
from pathlib import Path
from dotenv import load_dotenv

# Get project root directory (parent of src/)
PROJECT_ROOT = Path(__file__).parent.parent

# Load environment variables from .env file (if exists - local dev only)
env_file = PROJECT_ROOT / '.env'
if env_file.exists():
    load_dotenv(env_file)

# ═══════════════════════════════════════════════════════════════════
# ENVIRONMENT DETECTION
# ═══════════════════════════════════════════════════════════════════

def detect_environment() -> str:
    """
    Detect which environment we're running in

    Returns:
        'cloud_run', 'kubernetes', 'docker', or 'local'
    """
    if os.getenv('K_SERVICE'):
        return 'cloud_run'

    if os.getenv('KUBERNETES_SERVICE_HOST'):
        return 'kubernetes'

    if Path('/.dockerenv').exists():
        return 'docker'

    if os.getenv('GOOGLE_CLOUD_PROJECT') or os.getenv('GCP_PROJECT'):
        return 'cloud_run'

    return 'local'

RUNTIME_ENVIRONMENT = detect_environment()

# ═══════════════════════════════════════════════════════════════════
# CREDENTIAL RESOLUTION - Smart multi-source loading
# ═══════════════════════════════════════════════════════════════════

_credentials_path = None  # Lazy loaded

def resolve_credentials() -> str:
    """
    Resolve Google service account credentials from multiple sources.
    Priority order:
    1. Local file (GOOGLE_SHEETS_CREDENTIALS_FILE env var or default path)
    2. JSON string in environment variable (GOOGLE_SHEETS_CREDENTIALS_JSON)
    3. Application Default Credentials (for Workload Identity)

    Returns:
        Path to credentials JSON file (may be temp file for JSON string sources)
        None if using Application Default Credentials
    """
    creds_file = os.getenv('GOOGLE_SHEETS_CREDENTIALS_FILE')
    if creds_file:
        if not os.path.isabs(creds_file):
            creds_file = str(PROJECT_ROOT / creds_file)
        if os.path.exists(creds_file):
            print(f"[CONFIG] Using credentials file: {creds_file}")
            return creds_file

    default_path = PROJECT_ROOT / 'config' / 'credentials.json'
    if default_path.exists():
        print(f"[CONFIG] Using default credentials file: {default_path}")
        return str(default_path)

    creds_json = os.getenv('GOOGLE_SHEETS_CREDENTIALS_JSON')
    if creds_json:
        temp_path = Path(tempfile.gettempdir()) / 'url_extractor_credentials.json'
        temp_path.write_text(creds_json)
        print("[CONFIG] Using credentials from environment variable (GOOGLE_SHEETS_CREDENTIALS_JSON)")
        return str(temp_path)

    if RUNTIME_ENVIRONMENT in ('cloud_run', 'kubernetes'):
        print("[CONFIG] Using Application Default Credentials (Workload Identity)")
        return None  # Signal to use ADC

    raise ValueError(
        "No valid credentials source found. Set one of:\n"
        "  - GOOGLE_SHEETS_CREDENTIALS_FILE (path to JSON file)\n"
        "  - GOOGLE_SHEETS_CREDENTIALS_JSON (JSON string)\n"
        "  - Place credentials.json in config/ folder"
    )

def get_credentials_path():
    """Get credentials path (lazy loaded)"""
    global _credentials_path
    if _credentials_path is None:
        _credentials_path = resolve_credentials()
    return _credentials_path

# ═══════════════════════════════════════════════════════════════════
# CONFIGURATION VALUES
# ═══════════════════════════════════════════════════════════════════

# Extraction service (POST {"url": ...} -> {"extractedData": ...})
EXTRACTION_SERVICE_URL = os.getenv('EXTRACTION_SERVICE_URL', 'http://localhost:3000')
EXTRACTION_ENDPOINT = os.getenv('EXTRACTION_ENDPOINT', '/api/upload')
EXTRACTION_TIMEOUT_SECONDS = float(os.getenv('EXTRACTION_TIMEOUT_SECONDS', '60'))

# Google Sheets Configuration
GOOGLE_SHEETS_SCOPES = [
    'https://www.googleapis.com/auth/spreadsheets',
]
GOOGLE_SHEET_ID = os.getenv('GOOGLE_SHEET_ID')
SHEET_NAME = os.getenv('SHEET_NAME', 'Sheet1')
SHEETS_TIMEOUT_SECONDS = float(os.getenv('SHEETS_TIMEOUT_SECONDS', '30'))
# Values are written verbatim, no formula interpretation
SHEETS_VALUE_INPUT_OPTION = 'RAW'
SPREADSHEET_URL_TEMPLATE = 'https://docs.google.com/spreadsheets/d/{sheet_id}'

# Authentication provider: 'service_account' or 'stored_token'
AUTH_PROVIDER = os.getenv('AUTH_PROVIDER', 'service_account').lower()
TOKEN_STORE_PATH = os.getenv('TOKEN_STORE_PATH', str(PROJECT_ROOT / 'data' / 'tokens.json'))
TOKEN_STORE_KEY = os.getenv('TOKEN_STORE_KEY', 'google_access_token')

# Local workbook export
WORKBOOK_SHEET_NAME = os.getenv('WORKBOOK_SHEET_NAME', 'Fatal Encounters Data')
DEFAULT_EXPORT_FILENAME = os.getenv('DEFAULT_EXPORT_FILENAME', 'fatal-encounters-data.xlsx')

# Derived record fields, always the last two columns
EXTRACTION_DATE_FIELD = 'Extraction Date'
SOURCE_URL_FIELD = 'Source URL'
EXTRACTION_DATE_FORMAT = os.getenv('EXTRACTION_DATE_FORMAT', '%m/%d/%Y, %I:%M:%S %p')

# Monitoring Configuration
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_DIR = os.getenv('LOG_DIR', str(PROJECT_ROOT / 'logs'))
LOG_FILE_MAX_MB = int(os.getenv('LOG_FILE_MAX_MB', '10'))
LOG_FILE_BACKUP_COUNT = int(os.getenv('LOG_FILE_BACKUP_COUNT', '5'))

# ═══════════════════════════════════════════════════════════════════
# REST API (FastAPI + Swagger)
# ═══════════════════════════════════════════════════════════════════

API_PORT = int(os.getenv('API_PORT', '8000'))
API_HOST = os.getenv('API_HOST', '0.0.0.0')

# Cloud Run sets PORT to the single port it routes traffic to
_cloud_run_port = os.getenv('PORT')
if _cloud_run_port:
    API_PORT = int(_cloud_run_port)

# CORS configuration (comma-separated origins)
API_CORS_ORIGINS = os.getenv('API_CORS_ORIGINS', 'http://localhost:3000').split(',')


def validate_config():
    """Validate that all required configuration is present"""
    errors = []

    print(f"[CONFIG] Runtime environment: {RUNTIME_ENVIRONMENT}")

    if not EXTRACTION_SERVICE_URL:
        errors.append("EXTRACTION_SERVICE_URL is not set")

    if EXTRACTION_TIMEOUT_SECONDS <= 0:
        errors.append("EXTRACTION_TIMEOUT_SECONDS must be positive")

    if not GOOGLE_SHEET_ID:
        errors.append("GOOGLE_SHEET_ID is not set")

    if AUTH_PROVIDER not in ('service_account', 'stored_token'):
        errors.append(f"AUTH_PROVIDER must be 'service_account' or 'stored_token', got '{AUTH_PROVIDER}'")

    if AUTH_PROVIDER == 'service_account':
        try:
            creds_path = get_credentials_path()
            if creds_path and not os.path.exists(creds_path):
                errors.append(f"Google credentials file not found: {creds_path}")
        except ValueError as e:
            errors.append(str(e))

    if errors:
        raise ValueError("Configuration errors:\n" + "\n".join(errors))

    return True


if __name__ == "__main__":
    try:
        validate_config()
        print("[OK] Configuration validated successfully")
    except ValueError as e:
        print(f"[FAIL] Configuration validation failed:\n{e}")
