from . import crud_device as device
from . import crud_status_history as status_history
from . import crud_system_config as system_config
