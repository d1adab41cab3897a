from .health_api import HealthApiImpl  # noqa: F401
from .controllers_api import ControllersApiImpl  # noqa: F401
from .logs_api import LogsApiImpl  # noqa: F401
