from typing import Any, Dict, Optional

import requests
from loguru import logger

from shared_modules.config import Config

# Sperrseiten von Proxy/Firewall statt einer Antwort des Workflow-Systems
BLOCK_PAGE_MARKERS = ("Blocked Access", "Warning - Restricted")


class WebhookConfigurationError(RuntimeError):
    """
    Keine Webhook-URL konfiguriert.
    """


class WebhookSubmissionError(RuntimeError):
    """
    Der Webhook hat die Vertragsdaten abgelehnt. status enthält den HTTP-Status.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


def friendly_message(status: int, detail: str) -> str:
    """
    Verständliche Fehlermeldung für die Oberfläche anhand des HTTP-Status.
    """
    if status == 403:
        return "n8n workflow is not active or webhook access is forbidden. Please activate the workflow in n8n."
    if status == 404:
        return "n8n webhook not found. Please check the webhook URL configuration."
    if status >= 500:
        return "n8n server error. Please try again or check n8n workflow logs."
    return detail


def _error_detail(response: requests.Response) -> str:
    """Fehlertext aus JSON- oder Text-Antwort; lange HTML-Seiten werden nicht übernommen."""
    detail = response.reason or ""
    content_type = response.headers.get("content-type", "")
    try:
        if "application/json" in content_type:
            data = response.json()
            return data.get("message") or data.get("error") or detail
        text = response.text
    except ValueError as e:
        logger.debug(f"Fehlerantwort nicht lesbar: {e}")
        return detail
    if any(marker in text for marker in BLOCK_PAGE_MARKERS):
        return "Webhook blocked by firewall/proxy. Please check network access."
    if len(text) < 200:
        return text
    return detail


class ContractSubmitter:
    """
    Leitet Vertragsdaten aus dem Formular unverändert an den Workflow-Webhook weiter.
    Kein erneuter Versuch bei Fehlern.
    """

    def __init__(self, config: Config, session: Optional[requests.Session] = None):
        self.config: Config = config
        self.session = session or requests

    def submit(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Sendet payload als JSON an den Webhook.

        Returns:
            dict: JSON-Antwort des Webhooks.
        Raises:
            WebhookConfigurationError: Wenn keine URL konfiguriert ist.
            WebhookSubmissionError: Bei Netzwerkfehlern oder Status ausserhalb 2xx.
        """
        url = self.config.get_webhook_url()
        if not url:
            logger.error("N8N_WEBHOOK_URL ist nicht gesetzt.")
            raise WebhookConfigurationError("Webhook URL not configured")

        logger.info(f"Leite Vertragsdaten an {url} weiter.")
        try:
            response = self.session.post(url, json=payload, timeout=self.config.webhook.timeout)
        except requests.RequestException as e:
            logger.error(f"Webhook nicht erreichbar: {e}")
            raise WebhookSubmissionError(f"Webhook not reachable: {e}") from e

        logger.debug(f"Webhook-Antwort: {response.status_code}")
        if not response.ok:
            detail = _error_detail(response)
            logger.error(f"Webhook meldet Fehler {response.status_code}: {detail}")
            raise WebhookSubmissionError(friendly_message(response.status_code, detail), response.status_code)

        try:
            data = response.json()
        except ValueError:
            # Manche Workflows antworten ohne Inhalt
            data = {"success": True}
        logger.success("Vertrag erfolgreich übermittelt.")
        return data
