from .ownership import ensure_owned
from .transfer import export_user_data, import_user_data

__all__ = ["ensure_owned", "export_user_data", "import_user_data"]
