"""Idempotency utilities for the create-order endpoint.

A client may send an ``Idempotency-Key`` header with ``POST /api/orders/``.
The first request with a key records a hash of the payload; once the
request finishes its HTTP status and body are stored on the record.
Retries with the same key and payload replay the stored response instead
of placing a second order. Reusing a key with a different payload is a
conflict.
"""

import hashlib
import json
from django.db import transaction, IntegrityError
from .models import IdempotencyKey


class IdempotencyConflict(Exception):
    """The key was already used for a different payload."""


class IdempotencyInProgress(Exception):
    """The key is known but its first request has not finished yet."""


def request_hash(payload) -> str:
    """Compute a stable SHA-256 hash for a JSON-serializable payload.

    Keys are sorted and separators compacted so logically equal payloads
    hash identically regardless of key order.
    """
    body = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(body.encode("utf-8")).hexdigest()


@transaction.atomic
def get_or_create_idempotent(key: str, payload):
    """Get-or-create the idempotency record for ``key``.

    The create runs in a nested savepoint so an IntegrityError (the key
    already exists) only rolls back that block. The existing record is
    then read with a row lock before its hash is compared.

    Args:
        key: Client-provided idempotency key.
        payload: Request payload used to compute the request hash.

    Returns:
        tuple[bool, IdempotencyKey]: ``(existing, rec)``; ``existing`` is
        True when a finished response can be replayed from ``rec``.

    Raises:
        IdempotencyConflict: The stored hash differs from this payload.
        IdempotencyInProgress: The first request has no stored response.
    """
    h = request_hash(payload)

    try:
        with transaction.atomic():
            rec = IdempotencyKey.objects.create(key=key, request_hash=h)
            return False, rec
    except IntegrityError:
        rec = IdempotencyKey.objects.select_for_update().get(key=key)

    if rec.request_hash != h:
        raise IdempotencyConflict(key)
    if not rec.response_status:
        raise IdempotencyInProgress(key)
    return True, rec


def finalize(rec: IdempotencyKey, status_code: int, body, order_id=None):
    """Store the final response of an idempotent request.

    Args:
        rec: The idempotency record to update.
        status_code: HTTP status code of the response.
        body: JSON-serializable response body.
        order_id: Identifier of the created order, if any.
    """
    rec.response_status = status_code
    rec.response_body = body
    if order_id is not None:
        rec.order_id = order_id
    rec.save(update_fields=["response_status", "response_body", "order"])
