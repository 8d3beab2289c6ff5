from typing import Optional
from pydantic import BaseModel

class LoggingConfig(BaseModel):
    log_file: Optional[str] = None                  # None = nur Konsole
    log_level: Optional[str] = "INFO"               # Defaultwert
    rotation: Optional[str] = "10 MB"
    retention: Optional[str] = "10 days"
