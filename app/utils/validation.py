"""
Validation utilities - the validation gate.

Raw payloads (JSON bodies, form data) are parsed with a pydantic schema into a
typed input. Services only ever see inputs that passed through here.
"""
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, TypeVar

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from app.domain.errors import ValidationError
from app.utils.result import Ok, Err, Result

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def normalize_decimal_input(value: str) -> str:
    """
    Normalize an amount: comma becomes a dot

    Example:
        >>> normalize_decimal_input("100,50")
        "100.50"
        >>> normalize_decimal_input("100.50")
        "100.50"
    """
    return value.strip().replace(",", ".")


def validate_decimal_amount(value: str, max_decimal_places: int = 2) -> tuple[bool, str | None]:
    """
    Validate a money string

    Returns:
        (is_valid, error_message)

    Example:
        >>> validate_decimal_amount("100.50")
        (True, None)
        >>> validate_decimal_amount("100.505")
        (False, "At most 2 decimal places")
    """
    normalized = normalize_decimal_input(value)

    try:
        Decimal(normalized)
    except (InvalidOperation, ValueError):
        return False, "Invalid amount"

    pattern = rf"^-?\d+(\.\d{{1,{max_decimal_places}}})?$"
    if not re.match(pattern, normalized):
        return False, f"At most {max_decimal_places} decimal places"

    return True, None


def coerce_decimal(value: Any) -> Any:
    """BeforeValidator: accept "12,50" from forms; floats go through str() to avoid binary noise."""
    if isinstance(value, bool):
        # True/False would otherwise pass as 1/0
        raise ValueError("Expected a number")
    if isinstance(value, str):
        return normalize_decimal_input(value)
    if isinstance(value, float):
        return str(value)
    return value


def parse_iso_date(value: Any) -> Any:
    """BeforeValidator: only YYYY-MM-DD strings (or date objects) are dates."""
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not ISO_DATE_RE.match(value):
        raise ValueError("Expected a date in YYYY-MM-DD format")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValueError(f"{value} is not a valid calendar date")


def blank_to_none(value: str | None) -> str | None:
    """AfterValidator: an empty optional text field means "not given"."""
    return value or None


def check_money_places(value: Decimal) -> Decimal:
    """AfterValidator: at most two significant decimal places ("12.500" is fine)."""
    is_valid, error = validate_decimal_amount(format(value.normalize(), "f"))
    if not is_valid:
        raise ValueError(error)
    return value


Money = Annotated[Decimal, BeforeValidator(coerce_decimal), AfterValidator(check_money_places)]
# hours are stored with scale 2, so they get the same cap as money
Quantity = Annotated[Decimal, BeforeValidator(coerce_decimal), AfterValidator(check_money_places)]
OptionalText = Annotated[str | None, AfterValidator(blank_to_none)]
IsoDate = Annotated[date, BeforeValidator(parse_iso_date)]


def _format_loc(loc: tuple, names: dict[str, str]) -> str:
    # pydantic reports locations by alias (camelCase); callers know fields by name
    return ".".join(names.get(part, str(part)) if isinstance(part, str) else str(part) for part in loc)


def validate_schema(schema: type[SchemaT], data: Any) -> Result[SchemaT, ValidationError]:
    """
    Parse raw data with a pydantic schema.

    All violations are joined into one message ("amount: ..., category: ...");
    the first offending field is reported as ValidationError.field.
    """
    if isinstance(data, schema):
        return Ok(data)
    try:
        return Ok(schema.model_validate(data))
    except PydanticValidationError as exc:
        errors = exc.errors(include_url=False)
        names = {f.alias: name for name, f in schema.model_fields.items() if f.alias}
        message = ", ".join(
            f"{_format_loc(e['loc'], names)}: {e['msg']}" if e["loc"] else e["msg"]
            for e in errors
        )
        field = _format_loc(errors[0]["loc"], names) if errors and errors[0]["loc"] else None
        return Err(ValidationError(message, field=field))


class InputSchema(BaseModel):
    """
    Base for request inputs: camelCase or snake_case keys, unknown keys ignored,
    strings stripped.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )
