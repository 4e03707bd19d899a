"""
Configuration module for Worklog Sheet Sync
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
    Resolve Google Sheets credentials from multiple sources.
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
        temp_path = Path(tempfile.gettempdir()) / 'worklog_sync_credentials.json'
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
# WRITABLE PATHS - Handle containerized environments
# ═══════════════════════════════════════════════════════════════════

def get_writable_path(folder_name: str) -> str:
    """Get a writable path that works in all environments"""
    env_path = os.getenv(folder_name.upper() + '_FOLDER')
    if env_path:
        if os.path.isabs(env_path):
            path = Path(env_path)
        else:
            path = PROJECT_ROOT / env_path
    else:
        path = PROJECT_ROOT / folder_name

    # In containers, /app might be read-only; use /tmp as fallback
    if not path.exists():
        try:
            path.mkdir(parents=True, exist_ok=True)
        except (PermissionError, OSError):
            path = Path(tempfile.gettempdir()) / 'worklog_sync' / folder_name
            path.mkdir(parents=True, exist_ok=True)

    return str(path)

# ═══════════════════════════════════════════════════════════════════
# GOOGLE SHEETS
# ═══════════════════════════════════════════════════════════════════

GOOGLE_SHEET_ID = os.getenv('GOOGLE_SHEET_ID')

# Master tab: column A = employee names, column B = product names
MASTER_SHEET_NAME = os.getenv('MASTER_SHEET_NAME', '管理')
MASTER_DATA_RANGE = os.getenv('MASTER_DATA_RANGE', 'A:B')

# Personal sheets are named per employee and pay period
PERSONAL_SHEET_NAME_TEMPLATE = os.getenv(
    'PERSONAL_SHEET_NAME_TEMPLATE', '{employee}_{year}年{month}月'
)

# Days before this belong to the previous month's pay period
PERIOD_START_DAY = int(os.getenv('PERIOD_START_DAY', '21'))

# ═══════════════════════════════════════════════════════════════════
# CORRECTION
# ═══════════════════════════════════════════════════════════════════

LOW_CONFIDENCE_THRESHOLD = float(os.getenv('LOW_CONFIDENCE_THRESHOLD', '0.4'))

MASTER_DATA_CACHE_TTL_SECONDS = int(os.getenv('MASTER_DATA_CACHE_TTL_SECONDS', '1800'))  # 30 minutes
MASTER_DATA_CACHE_VERSION = '1.0'
# Optional on-disk copy of the cache; empty keeps it in memory only
MASTER_DATA_CACHE_FILE = os.getenv('MASTER_DATA_CACHE_FILE', '')

# ═══════════════════════════════════════════════════════════════════
# ROW RECONCILIATION
# ═══════════════════════════════════════════════════════════════════

LUNCH_BREAK_MINUTES = int(os.getenv('LUNCH_BREAK_MINUTES', '45'))
MID_BREAK_MINUTES = int(os.getenv('MID_BREAK_MINUTES', '15'))

PACKAGING_REMARK_LABEL = os.getenv('PACKAGING_REMARK_LABEL', '包装')
MACHINE_REMARK_LABEL = os.getenv('MACHINE_REMARK_LABEL', '機械')
REMARK_SEPARATOR = ' | '

STORE_MAX_ATTEMPTS = int(os.getenv('STORE_MAX_ATTEMPTS', '3'))
STORE_RETRY_BASE_DELAY_SECONDS = float(os.getenv('STORE_RETRY_BASE_DELAY_SECONDS', '1.0'))

# ═══════════════════════════════════════════════════════════════════
# MONITORING
# ═══════════════════════════════════════════════════════════════════

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_DIR = os.getenv('LOG_DIR') or get_writable_path('logs')
LOG_FILE_MAX_MB = int(os.getenv('LOG_FILE_MAX_MB', '10'))
LOG_FILE_BACKUP_COUNT = int(os.getenv('LOG_FILE_BACKUP_COUNT', '5'))

# ═══════════════════════════════════════════════════════════════════
# REST API (FastAPI + Swagger)
# ═══════════════════════════════════════════════════════════════════

API_PORT = int(os.getenv('API_PORT', '8000'))
API_HOST = os.getenv('API_HOST', '0.0.0.0')

# Cloud Run routes traffic to the port it sets in PORT
_cloud_run_port = os.getenv('PORT')
if _cloud_run_port:
    API_PORT = int(_cloud_run_port)

# CORS configuration (comma-separated origins)
API_CORS_ORIGINS = os.getenv('API_CORS_ORIGINS', 'http://localhost:5173').split(',')

APP_NAME = os.getenv('APP_NAME', 'Worklog Sheet Sync')
APP_VERSION = os.getenv('APP_VERSION', '1.0.0')


def validate_config():
    """Validate that all required configuration is present"""
    errors = []

    print(f"[CONFIG] Runtime environment: {RUNTIME_ENVIRONMENT}")

    if not GOOGLE_SHEET_ID:
        errors.append("GOOGLE_SHEET_ID is not set")

    if not 1 <= PERIOD_START_DAY <= 28:
        errors.append(f"PERIOD_START_DAY must be between 1 and 28, got {PERIOD_START_DAY}")

    if not 0.0 <= LOW_CONFIDENCE_THRESHOLD <= 1.0:
        errors.append(f"LOW_CONFIDENCE_THRESHOLD must be within 0..1, got {LOW_CONFIDENCE_THRESHOLD}")

    if STORE_MAX_ATTEMPTS < 1:
        errors.append(f"STORE_MAX_ATTEMPTS must be at least 1, got {STORE_MAX_ATTEMPTS}")

    try:
        creds_path = get_credentials_path()
        if creds_path and not os.path.exists(creds_path):
            errors.append(f"Google Sheets credentials file not found: {creds_path}")
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
