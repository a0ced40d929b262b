# Overview: Flask blueprints for officers, workshops, training sessions, enrollments and reference data.

"""
Every record type exposes the same surface, generated from its Resource:

    POST   <prefix>            create       (manage permission)
    GET    <prefix>            list         (view permission)
    GET    <prefix>/<id>       show         (view permission)
    PATCH  <prefix>/<id>       partial update with concurrency token
    DELETE <prefix>/<id>       core records only
"""

from flask import Blueprint, request

from ..decorators import require_permission
from ..resources import (
    OFFICERS,
    REFERENCE_RESOURCES,
    TRAINING_ENROLLMENTS,
    TRAINING_SESSIONS,
    WORKSHOPS,
)
from ..services import resource_service
from .helpers import created, envelope, paged, read_json


def resource_blueprint(resource, *, deletable: bool) -> Blueprint:
    bp = Blueprint(resource.plural, __name__, url_prefix=resource.url_prefix)

    @bp.post("")
    @require_permission(resource.manage_permission)
    def create_record(current_user):
        entity = resource_service.create_record(resource, read_json())
        return created(resource.name, entity, f"{resource.url_prefix}/{entity.id}")

    @bp.get("")
    @require_permission(resource.view_permission)
    def list_records(current_user):
        items, metadata = resource_service.list_records(resource, request.args)
        return paged(resource.plural, items, metadata)

    @bp.get("/<int:record_id>")
    @require_permission(resource.view_permission)
    def show_record(record_id, current_user):
        entity = resource_service.get_record(resource, record_id)
        return envelope(**{resource.name: entity.to_dict()})

    @bp.patch("/<int:record_id>")
    @require_permission(resource.manage_permission)
    def update_record(record_id, current_user):
        entity = resource_service.update_record(resource, record_id, read_json())
        return envelope(**{resource.name: entity.to_dict()})

    if deletable:
        @bp.delete("/<int:record_id>")
        @require_permission(resource.manage_permission)
        def delete_record(record_id, current_user):
            resource_service.delete_record(resource, record_id)
            return envelope(message=f"{resource.name} successfully deleted")

    return bp


def record_blueprints() -> list[Blueprint]:
    core = [
        resource_blueprint(r, deletable=True)
        for r in (OFFICERS, WORKSHOPS, TRAINING_SESSIONS, TRAINING_ENROLLMENTS)
    ]
    reference = [resource_blueprint(r, deletable=False) for r in REFERENCE_RESOURCES]
    return core + reference
