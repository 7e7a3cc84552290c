"""
Resolve a scanned or typed string to the visitor it identifies.

One lookup covers every channel the desk receives identifiers from:

    * badge id / stored QR payload, typed or scanned as-is
    * a URL or other text embedding the badge UUID
    * a photo data URI stored as a QR code by older kiosks
    * phone (exact, or digits-only against the stored number with its
      punctuation removed), e-mail and the four government ids

When several visits match, the most recently checked-in one wins.
"""

import re

from django.db.models import F, Q, Value
from django.db.models.functions import Replace

from .exceptions import ValidationError
from .models import Visitor

UUID_RE = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE
)
NON_DIGITS_RE = re.compile(r"\D+")
PHONE_SHAPED_RE = re.compile(r"[\d\s().+-]+")
DATA_URI_PREFIX = "data:image/"
PHONE_PUNCTUATION = ("-", " ", "(", ")", "+", ".")
# Shorter digit strings could end many unrelated numbers.
MIN_SUFFIX_DIGITS = 7

EXACT_FIELDS = (
    "badge_id", "qr_code", "phone", "email",
    "aadhaar_id", "pan_id", "passport_id", "driving_license_id",
)


def digits_only(raw):
    return NON_DIGITS_RE.sub("", raw)


def extract_badge_candidate(raw):
    match = UUID_RE.search(raw)
    return match.group(0).lower() if match else None


def is_image_data_uri(raw):
    return raw.startswith(DATA_URI_PREFIX)


def stripped_phone():
    """The stored phone with its punctuation removed, as a query expression."""
    expr = F("phone")
    for char in PHONE_PUNCTUATION:
        expr = Replace(expr, Value(char), Value(""))
    return expr


def build_identifier_query(raw):
    query = Q()
    for field in EXACT_FIELDS:
        query |= Q(**{field: raw})
    # E-mails are stored lower-cased.
    query |= Q(email=raw.lower())

    digits = digits_only(raw)
    if digits:
        query |= Q(phone_digits=digits)
        if len(digits) >= MIN_SUFFIX_DIGITS and PHONE_SHAPED_RE.fullmatch(raw):
            query |= Q(phone_digits__endswith=digits)

    badge = extract_badge_candidate(raw)
    if badge:
        query |= Q(badge_id=badge)

    if is_image_data_uri(raw):
        query |= Q(qr_code__startswith=DATA_URI_PREFIX)
    return query


def resolve(raw_input):
    """Return the visitor identified by ``raw_input`` or None."""
    raw = str(raw_input or "").strip()
    if not raw:
        raise ValidationError("Identifier is required.")
    return (
        Visitor.objects.annotate(phone_digits=stripped_phone())
        .filter(build_identifier_query(raw))
        .order_by("-check_in_time", "-created_at")
        .first()
    )
