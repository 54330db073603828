import json
import logging
import os
import threading

import numpy as np

from config import settings
from core.errors import StoreError
from core.models import Contact

logger = logging.getLogger(__name__)


def _write_json(path, data):
    """Write through a temp file so readers never see half a file"""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    tmp_path = f"{path}.tmp"
    with open(tmp_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    os.replace(tmp_path, path)


def _read_json(path):
    if not os.path.exists(path):
        return {}
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


class EmbeddingDB:
    """Local roster: {name: {"embeddings": [[...], ...], "contact": {...}}}"""

    def __init__(self, db_path=None):
        self.db_path = db_path or settings.ROSTER_DB_PATH
        self._lock = threading.Lock()

    def load(self):
        try:
            data = _read_json(self.db_path)
        except (OSError, ValueError) as e:
            raise StoreError(f"Error loading roster {self.db_path}: {e}") from e
        if not isinstance(data, dict):
            raise StoreError(f"Error loading roster {self.db_path}: expected a JSON object")
        return data

    def save(self, data):
        try:
            _write_json(self.db_path, data)
        except OSError as e:
            raise StoreError(f"Error saving roster {self.db_path}: {e}") from e

    def list_embeddings(self):
        pairs = []
        for name, entry in self.load().items():
            for emb in entry.get('embeddings', []):
                pairs.append((name, np.asarray(emb, dtype=np.float32)))
        return pairs

    def add_embedding(self, name, embedding, contact=None):
        emb = embedding.tolist() if hasattr(embedding, 'tolist') else list(embedding)
        with self._lock:
            data = self.load()
            entry = data.setdefault(name, {'embeddings': [], 'contact': {}})
            entry['embeddings'].append([float(v) for v in emb])
            if contact is not None:
                merged = entry.setdefault('contact', {})
                merged.update({k: v for k, v in contact.to_dict().items() if v})
            self.save(data)
        logger.info("Stored sample %d for %s", len(entry['embeddings']), name)

    def get_contact(self, name):
        entry = self.load().get(name)
        if entry is None:
            return None
        return Contact.from_dict(entry.get('contact'))

    def list_identities(self):
        return list(self.load().keys())
