from fastapi import HTTPException
from pydantic import ValidationError
from models.user import Address
import json
import re


def clean_quotes(value):
    """Strip the stray quotes some clients wrap around multipart form values."""
    if not isinstance(value, str):
        return value
    return re.sub(r'^"|"$', "", value).strip()


def parse_address(value) -> Address:
    try:
        data = json.loads(value) if isinstance(value, str) else value
        return Address.model_validate(data)
    except (json.JSONDecodeError, ValidationError):
        raise HTTPException(
            status_code=400,
            detail="Invalid address format. Please provide a valid JSON object",
        )
