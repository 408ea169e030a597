from .backends import (
    MAX_SYM_NAME,
    UNDNAME_COMPLETE,
    DECODER_CHOICES,
    DbgHelpBackend,
    UndnameBackend,
    select_backend,
)
from .service import DemanglingService
