import math
import re
from typing import Any, Dict, Optional

from pydantic import BaseModel, ValidationError, constr, validator

# Nombre décimal ASCII, espaces autour tolérés
PRICE_PATTERN = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$", re.ASCII)


class ProductValidationError(Exception):
    """First failing field of a create/update payload."""

    def __init__(self, field: str, message: str, error_type: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message
        self.error_type = error_type

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message, "type": self.error_type}


class ProductUpdate(BaseModel):
    # L'ordre des champs fixe l'ordre de validation
    name: constr(min_length=3)
    details: constr(min_length=3, max_length=200)
    price: str
    productImage: Optional[str] = None

    @validator('price', pre=True)
    def price_must_be_a_number(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            v = str(v)
        if not isinstance(v, str) or not PRICE_PATTERN.match(v):
            raise ValueError('Price must be a number')
        if not math.isfinite(float(v)):
            raise ValueError('Price must be a number')
        return v


class ProductCreate(ProductUpdate):
    productImage: str  # Obligatoire: l'image doit avoir été acceptée


class ProductResponse(BaseModel):
    id: str
    name: str
    details: str
    price: str
    productImage: str

    class Config:
        from_attributes = True


def _validate(schema, fields: Dict[str, Any]):
    try:
        return schema(**fields)
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or "body"
        raise ProductValidationError(field, error["msg"], error["type"])


def validate_create(fields: Dict[str, Any]) -> ProductCreate:
    return _validate(ProductCreate, fields)


def validate_update(fields: Dict[str, Any]) -> ProductUpdate:
    return _validate(ProductUpdate, fields)
