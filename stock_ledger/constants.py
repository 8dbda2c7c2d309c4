# stock_ledger/constants.py
APP_NAME = "Stock Ledger"

DATA_DIR = "data"
DB_FILE_NAME = "stock_ledger.db"

SCHEMA_VERSION = "1"

# table names
TABLE_SCHEMA_VERSION = "schema_version"
TABLE_PRODUCTS = "products"
TABLE_SALES = "sales"
TABLE_SALE_ITEMS = "sale_items"

# dashboard: products strictly below this level are flagged
LOW_STOCK_THRESHOLD = 5

# seconds a writer waits on a locked database before giving up
DEFAULT_BUSY_TIMEOUT_S = 10.0
