"""
Decode JSON or form POST bodies into request models.
"""
import json
from typing import Type, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError
from starlette.formparsers import FormParser

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "application/form-data")

RequestModel = TypeVar("RequestModel", bound=BaseModel)


class UndecodableBody(Exception):
    pass


class MissingFields(Exception):
    def __init__(self, fields):
        self.fields = fields
        super().__init__(f"Missing or invalid fields: {', '.join(fields)}")


def media_type(request: Request) -> str:
    content_type = request.headers.get("content-type", "")
    return content_type.split(";", 1)[0].strip().lower()


def is_form_request(request: Request) -> bool:
    return media_type(request) in FORM_CONTENT_TYPES


async def read_body(request: Request) -> dict:
    if is_form_request(request):
        # Parsed directly so application/form-data is read like urlencoded
        try:
            form = await FormParser(request.headers, request.stream()).parse()
        except ValueError as e:
            raise UndecodableBody(str(e)) from e
        # Repeated keys: last value wins
        return dict(form.multi_items())

    raw = await request.body()
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise UndecodableBody(str(e)) from e
    if not isinstance(data, dict):
        raise UndecodableBody("Request body must be an object")
    return data


async def decode_request(request: Request, model: Type[RequestModel]) -> RequestModel:
    """
    Parse the request body and validate it into ``model``.

    Raises:
        UndecodableBody: the body is not valid JSON / form data
        MissingFields: a required field is absent, null or of the wrong type
    """
    data = await read_body(request)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        fields = [".".join(str(part) for part in err["loc"]) for err in e.errors()]
        raise MissingFields(fields) from e


def request_body(model: Type[RequestModel], unreadable_error, missing_error):
    """
    Build a dependency that decodes the body into ``model``, raising the
    given API errors for an unreadable body and for missing fields.
    """
    async def dependency(request: Request) -> RequestModel:
        try:
            return await decode_request(request, model)
        except UndecodableBody as e:
            raise unreadable_error() from e
        except MissingFields as e:
            raise missing_error() from e

    return dependency
