from llm_admin.utils.time import utcnow
from llm_admin.utils.exceptions import raise_forbidden, raise_not_found, raise_unauthorized

__all__ = ["utcnow", "raise_forbidden", "raise_not_found", "raise_unauthorized"]
