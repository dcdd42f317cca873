"""TRSS (Terminal RSS) interchange format: models, fingerprints, NDJSON."""
from hotbrew.trss.fingerprint import canonical_url, fallback_key, fingerprint, generate_id
from hotbrew.trss.models import Digest, DigestMeta, DigestSection, Item, ItemSource, new_digest
from hotbrew.trss.ndjson import decode_digest, decode_items, encode_digest, encode_items

__all__ = [
    "Digest",
    "DigestMeta",
    "DigestSection",
    "Item",
    "ItemSource",
    "canonical_url",
    "decode_digest",
    "decode_items",
    "encode_digest",
    "encode_items",
    "fallback_key",
    "fingerprint",
    "generate_id",
    "new_digest",
]
