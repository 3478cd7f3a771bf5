import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./excel_analytics.db")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Upload limits
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))
PREVIEW_ROWS = int(os.getenv("PREVIEW_ROWS", "10"))

# Schema inference looks at this many leading rows per column
SAMPLE_ROWS = 5

# Chart projection limits
ROW_CAP_2D = 20
PIE_3D_MAX_WEDGES = 8
PIE_3D_MAX_WEDGES_COMPACT = 6
