"""
Error types raised by the calculation engines.

Invalid inputs are rejected before any numeric work starts. Errors carry
the offending trade (or position) id and field so callers can point the
user at the row that needs fixing.
"""

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class CalculationInputError(ValueError):
    """
    Input validation failure for a risk calculation.

    Attributes
    ----------
    record_id : str | None
        Id of the trade or position that failed validation
    field : str | None
        Name of the offending field
    """

    def __init__(
        self,
        message: str,
        record_id: str | None = None,
        field: str | None = None,
    ) -> None:
        self.record_id = record_id
        self.field = field
        prefix = ""
        if record_id is not None:
            prefix = f"Trade {record_id}: "
        if field is not None:
            prefix = f"{prefix}field '{field}': "
        super().__init__(f"{prefix}{message}")


def coerce_model(
    model_cls: type[ModelT],
    data: Any,
    record_id: str | None = None,
) -> ModelT:
    """
    Build a pydantic model, converting validation failures.

    Parameters
    ----------
    model_cls : type[BaseModel]
        Model to construct
    data : Any
        Existing instance or a mapping of raw values
    record_id : str | None
        Id used in the error message (defaults to ``data["id"]``)

    Returns
    -------
    BaseModel
        Validated model instance

    Raises
    ------
    CalculationInputError
        If ``data`` does not validate against ``model_cls``
    """
    if isinstance(data, model_cls):
        return data

    try:
        return model_cls.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        loc = first["loc"]
        if record_id is None:
            record_id = _locate_record_id(data, loc)
        field_names = [str(part) for part in loc if isinstance(part, str)]
        raise CalculationInputError(
            first["msg"],
            record_id=record_id,
            field=field_names[-1] if field_names else None,
        ) from exc


def _locate_record_id(data: Any, loc: tuple[Any, ...]) -> str | None:
    """Find the id of the (possibly nested) record an error points at."""
    record = data
    found: str | None = None
    for part in loc:
        if isinstance(record, dict) and part in record:
            record = record[part]
        elif isinstance(record, (list, tuple)) and isinstance(part, int) and part < len(record):
            record = record[part]
        else:
            break
        if isinstance(record, dict) and record.get("id") not in (None, ""):
            found = str(record["id"])
    if found is None and isinstance(data, dict) and data.get("id") not in (None, ""):
        found = str(data["id"])
    return found
