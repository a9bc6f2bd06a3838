from pydantic import BaseModel


def patch_fields(data: BaseModel) -> dict:
    """Fields the client actually sent, minus explicit nulls (null means "leave as is")."""
    return {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
