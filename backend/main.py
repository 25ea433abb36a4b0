from fastapi import FastAPI
from dotenv import load_dotenv

load_dotenv()
from fastapi.middleware.cors import CORSMiddleware
from database import Base, engine
from datetime import datetime
import os
import models  # registers every table on Base.metadata
import routers.chart_of_accounts as chart_of_accounts
import routers.transactions as transactions
import routers.balances as balances
import routers.payments as payments
import routers.expenses as expenses
import routers.withdrawals as withdrawals
import routers.orders as orders
import routers.logistics as logistics
import routers.shipping as shipping
import routers.returns as returns
import routers.profit as profit
import logging
from fastapi.openapi.utils import get_openapi


LOG_DIR = os.getenv("LOG_DIR", "logs")
os.makedirs(LOG_DIR, exist_ok=True) # Create 'logs' directory if it doesn't exist

# Create a unique log file name based on current date/time
current_time_str = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
LOG_FILE = os.path.join(LOG_DIR, f"app_{current_time_str}.log")

# Configure the root logger
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    filename=LOG_FILE,
    filemode='a'
)

# Also log to the console
console_handler = logging.StreamHandler()
console_handler.setLevel(logging.INFO)
console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
logging.getLogger().addHandler(console_handler)

logger = logging.getLogger(__name__)
logger.info("Application starting up...")
# --- End Logging Configuration ---


# Create database tables (migrations live in alembic/ for existing databases)
Base.metadata.create_all(bind=engine)


app = FastAPI()


allowed_origins_str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173"
)

# Split the string into a list, stripping any whitespace
allowed_origins = [origin.strip() for origin in allowed_origins_str.split(',')]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title="Retail Ledger API",
        version="1.0.0",
        description="Accounting ledger, party balances and fee rules for retail tenants",
        routes=app.routes,
    )
    openapi_schema["components"]["securitySchemes"] = {
        "TenantHeader": {
            "type": "apiKey",
            "in": "header",
            "name": "X-Tenant-ID",
        }
    }
    openapi_schema["security"] = [{"TenantHeader": []}]
    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi


app.include_router(chart_of_accounts.router)
app.include_router(transactions.router)
app.include_router(balances.router)
app.include_router(payments.router)
app.include_router(expenses.router)
app.include_router(withdrawals.router)
app.include_router(orders.router)
app.include_router(logistics.router)
app.include_router(shipping.router)
app.include_router(returns.router)
app.include_router(profit.router)

@app.get("/")
async def test_route():
    return {"message": "Retail ledger API is running"}
