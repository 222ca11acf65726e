import os
from dotenv import load_dotenv

load_dotenv()


def _csv_env(name: str, default: str):
    raw = os.getenv(name, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


# Cohort allowlists used by the statistics report (exact match)
MANAGERIAL_TITLES = _csv_env("MANAGERIAL_TITLES", "Gerente")
OPERATIONAL_DEPARTMENTS = _csv_env("OPERATIONAL_DEPARTMENTS", "Operaciones,TI")

# Business rules
MIN_EMPLOYEE_AGE = int(os.getenv("MIN_EMPLOYEE_AGE", 18))

# Pagination
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", 15))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", 100))
