from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()


# ============================================================================
# ENUMS
# ============================================================================

class CatalogCategory(str, enum.Enum):
    """Enumerated option categories delivered as reference catalogs"""
    ACCESSIBILITY = "accessibility"
    AUTHENTICATION_MODE = "authentication_mode"
    CHARGING_FACILITY = "charging_facility"
    CHARGING_MODE = "charging_mode"
    PAYMENT_OPTION = "payment_option"
    PLUG = "plug"
    VALUE_ADDED_SERVICE = "value_added_service"


class ImportStatus(str, enum.Enum):
    """Import run status"""
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
