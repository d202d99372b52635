# backend/tourhub/models/types.py
"""Column types shared by the models."""

from sqlalchemy import JSON, Numeric, Text
from sqlalchemy.dialects.postgresql import JSONB

# JSONB on Postgres, plain JSON elsewhere (tests run on SQLite)
json_type = JSONB(astext_type=Text()).with_variant(JSON(), "sqlite")

# Money is handled as float in the pricing and offer rules
money_type = Numeric(10, 2, asdecimal=False)
