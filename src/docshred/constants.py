"""Reserved field names and naming rules shared by shredding and updates."""

from __future__ import annotations

import re

DOC_ID = "_id"

# Vector search fields, only recognized at the top level of a document
VECTOR_EMBEDDING_FIELD = "$vector"
VECTOR_EMBEDDING_TEXT_FIELD = "$vectorize"

VALID_NAME_PATTERN = re.compile(r"[a-zA-Z0-9_-]+")

PATH_SEPARATOR = "."
