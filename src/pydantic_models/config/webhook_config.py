from typing import Optional
from pydantic import BaseModel

class WebhookConfig(BaseModel):
    url: Optional[str] = None           # überschreibbar mit N8N_WEBHOOK_URL
    timeout: Optional[float] = 30.0
