import os
from decimal import Decimal

# Database Configuration
# Uses default credentials for local Docker Compose setup
DB_URL = os.getenv("DATABASE_URL", "postgres://user:password@db:5432/fleet_db")

# Application Metadata
PROJECT_NAME = "Fleet Stock Consistency Engine"
VERSION = "1.0.0"

# Stock ledger
DEFAULT_REORDER_LEVEL = int(os.getenv("DEFAULT_REORDER_LEVEL", 10)) # Used when an item has no reorder level

# Operations
STEP_TIMEOUT_SECONDS = float(os.getenv("STEP_TIMEOUT_SECONDS", 10)) # Deadline applied to every step of an operation
HOLDING_VALUE_RATE = Decimal(os.getenv("HOLDING_VALUE_RATE", "0.10")) # Salvage value of a warehoused unit, share of total replacement cost

# Outbox Poller Configuration (stock alerts)
POLLING_INTERVAL = int(os.getenv("POLLING_INTERVAL", 1)) # Poller checks for new events every N seconds
MAX_ATTEMPTS = int(os.getenv("MAX_ATTEMPTS", 5)) # Max retries for an event
BATCH_SIZE = int(os.getenv("BATCH_SIZE", 50)) # How many events to fetch per poll
