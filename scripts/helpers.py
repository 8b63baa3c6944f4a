import re
import json

from config import Settings, settings


def extract_clean_json(raw: str | dict) -> dict:
    """
    Parse a model reply into a dict. Structured-output replies are bare JSON,
    older models sometimes still wrap it in a ```json fence.
    """
    if isinstance(raw, dict):
        return raw
    text = raw.strip()
    match = re.search(r'```(?:json)?\s*({[\s\S]*?})\s*```', text)
    if match:
        text = match.group(1)
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object from the model")
    return data


def build_session(cfg: Settings = settings):
    """Wire a LabSession against the local blob store and configured services."""
    from core.session import LabSession
    from core.state import AppState
    from services.cloud import CloudSync
    from services.db import BlobStore
    from services.lab_client import LabClient

    state = AppState(BlobStore.from_url(cfg.blob_store_url))
    client = LabClient(cfg.lab_api_url, timeout=cfg.lab_timeout_s)
    cloud = CloudSync(
        cfg.cloud_sync_url,
        cfg.cloud_sync_key,
        table=cfg.cloud_sync_table,
        timeout=cfg.cloud_sync_timeout_s,
    )
    return LabSession(state, client, cloud)
